"""
Built-in table of contents of the Constitution of Nepal 2015.

Served by the lookup tools when the clauses table is empty or unreachable,
and used to describe parts stored in the database.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional


class ConstitutionPart(NamedTuple):
    part_number: str
    title: str
    description: Optional[str] = None


FALLBACK_TOC: List[ConstitutionPart] = [
    ConstitutionPart("Part-1", "Preliminary", "Basic provisions defining Nepal, its sovereignty, and state symbols"),
    ConstitutionPart("Part-2", "Citizenship", "Provisions regarding acquisition and termination of citizenship"),
    ConstitutionPart("Part-3", "Fundamental Rights and Duties", "Rights guaranteed to citizens and their fundamental duties"),
    ConstitutionPart("Part-4", "Directive Principles, Policies and Obligations of the State", "Guiding principles for state governance and policy"),
    ConstitutionPart("Part-5", "Structure of State and Distribution of State Power", "Federal structure and distribution of power"),
    ConstitutionPart("Part-6", "President and Vice-President", "Roles, responsibilities and election of President and Vice-President"),
    ConstitutionPart("Part-7", "Federal Executive", "Structure and functions of the federal executive branch"),
    ConstitutionPart("Part-8", "Federal Legislature", "Composition and functions of federal legislative bodies"),
    ConstitutionPart("Part-9", "Federal Legislative Procedures", "Procedures for lawmaking at the federal level"),
    ConstitutionPart("Part-10", "Federal Financial Procedures", "Budget, revenue allocation and financial management"),
    ConstitutionPart("Part-11", "Judiciary", "Structure, jurisdiction and independence of courts"),
    ConstitutionPart("Part-12", "Attorney General", "Appointment, powers and functions of the Attorney General"),
    ConstitutionPart("Part-13", "State Executive", "Structure and functions of state executive bodies"),
    ConstitutionPart("Part-14", "State Legislature", "Composition and functions of state legislative bodies"),
    ConstitutionPart("Part-15", "State Legislative Procedures", "Procedures for lawmaking at the state level"),
    ConstitutionPart("Part-16", "State Financial Procedures", "Budget and financial management at the state level"),
    ConstitutionPart("Part-17", "Local Executive", "Structure and functions of local executive bodies"),
    ConstitutionPart("Part-18", "Local Legislature", "Composition and functions of local legislative bodies"),
    ConstitutionPart("Part-19", "Local Financial Procedures", "Budget and financial management at the local level"),
    ConstitutionPart("Part-20", "Interrelations between Federation, State and Local level", "Coordination and relations between different levels of government"),
    ConstitutionPart("Part-21", "Commission for the Investigation of Abuse of Authority", "Powers and functions of anti-corruption body"),
    ConstitutionPart("Part-22", "Auditor General", "Appointment, powers and functions of the Auditor General"),
    ConstitutionPart("Part-23", "Public Service Commission", "Structure and functions of the civil service commission"),
    ConstitutionPart("Part-24", "Election Commission", "Powers and functions of the electoral management body"),
    ConstitutionPart("Part-25", "National Human Rights Commission", "Structure and mandate of the human rights watchdog"),
    ConstitutionPart("Part-26", "National Natural Resources and Fiscal Commission", "Management and distribution of natural resources"),
    ConstitutionPart("Part-27", "Other Commissions", "Various commissions for marginalized communities and special interests"),
    ConstitutionPart("Part-28", "Provision Relating National Security", "Structure and mandate of security forces"),
    ConstitutionPart("Part-29", "Provision relating to Political Parties", "Registration and regulation of political parties"),
    ConstitutionPart("Part-30", "Emergency Power", "Declaration and management of state emergencies"),
    ConstitutionPart("Part-31", "Amendment to the Constitution", "Procedures for constitutional amendments"),
    ConstitutionPart("Part-32", "Miscellaneous", "Various provisions not covered elsewhere"),
    ConstitutionPart("Part-33", "Transitional Provisions", "Temporary arrangements during constitutional transition"),
    ConstitutionPart("Part-34", "Definitions and Interpretation", "Definitions of terms used in the constitution"),
    ConstitutionPart("Part-35", "Short Title, Commencement and Repeal", "Effective date and repeal of previous constitutions"),
]

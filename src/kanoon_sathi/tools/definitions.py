"""
LLM Tool Definitions

This module defines the authoritative tool/function schemas exposed to the
model. These definitions must remain strictly synchronized with:

- tools/base.py (TOOL_REGISTRY)
- The actual tool handler implementations

Only tools defined here can ever be invoked by the model.
"""

from __future__ import annotations

from typing import Dict, List, Any, Final


# ---------------------------------------------------------------------
# Tool Name Constants (Single Source of Truth)
# ---------------------------------------------------------------------

TOOL_GET_TABLE_OF_CONTENTS: Final[str] = "getConstitutionTableOfContents"
TOOL_GET_PART: Final[str] = "getConstitutionPart"
TOOL_GET_ARTICLE: Final[str] = "getConstitutionArticle"
TOOL_SEARCH_CONSTITUTION: Final[str] = "searchConstitution"


# ---------------------------------------------------------------------
# Tool Definitions
# ---------------------------------------------------------------------

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": TOOL_GET_TABLE_OF_CONTENTS,
            "description": "Retrieves the table of contents of the Constitution of Nepal 2015.",
            "parameters": {
                "type": "object",
                "properties": {
                    "format": {
                        "type": "string",
                        "enum": ["full", "summary", "structured"],
                        "description": (
                            "Format of the response: 'full' for detailed TOC with descriptions, "
                            "'summary' for just part numbers and titles, 'structured' for a "
                            "list of parts."
                        ),
                    }
                },
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_GET_PART,
            "description": (
                "Retrieves details about a specific part of the Constitution of Nepal 2015, "
                "including the articles it contains."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "partNumber": {
                        "type": "string",
                        "description": "Part number or name (e.g., 'Part-3' or 'Fundamental Rights').",
                        "minLength": 1,
                    }
                },
                "required": ["partNumber"],
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_GET_ARTICLE,
            "description": (
                "Retrieves the full text of a specific article of the Constitution of "
                "Nepal 2015, clause by clause."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "articleNumber": {
                        "type": "integer",
                        "description": "Article number (e.g., 17 for Article 17).",
                        "minimum": 1,
                    }
                },
                "required": ["articleNumber"],
                "additionalProperties": False,
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": TOOL_SEARCH_CONSTITUTION,
            "description": "Searches the Constitution of Nepal 2015 for specific keywords or phrases.",
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Keywords or phrases to search for in the constitution.",
                        "minLength": 1,
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum number of results to return (default: 10).",
                        "minimum": 1,
                        "maximum": 50,
                        "default": 10,
                    },
                },
                "required": ["query"],
                "additionalProperties": False,
            },
        },
    },
]

#!/usr/bin/env python3
"""
Language Detector

Infers the surface language of a snippet from substring markers. Bundles
are consulted in the fixed order of ``LANGUAGE_BUNDLES`` (solidity, python,
rust); the first predicate that matches wins and ``solidity`` is the
fallback, so mixed snippets resolve deterministically.
"""

import logging

__all__ = [
    "DEFAULT_LANGUAGE",
    "is_solidity",
    "is_python",
    "is_rust",
    "detect_language",
]

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "solidity"


def is_solidity(code: str) -> bool:
    return (
        "pragma solidity" in code
        or "contract " in code
        or ("function " in code and "public" in code)
    )


def is_python(code: str) -> bool:
    return "def " in code or ("import " in code and "from " in code)


def is_rust(code: str) -> bool:
    return "fn " in code or "use " in code or "struct " in code


def detect_language(code: str) -> str:
    """Return ``solidity``, ``python`` or ``rust`` for *code*."""
    from languages import LANGUAGE_BUNDLES

    for bundle in LANGUAGE_BUNDLES.values():
        if bundle.detect(code):
            logger.debug("Detected language: %s", bundle.name)
            return bundle.name

    logger.debug("No language markers found, defaulting to %s", DEFAULT_LANGUAGE)
    return DEFAULT_LANGUAGE

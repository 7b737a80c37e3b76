#!/usr/bin/env python3
"""
KUBERESERVE ERRORS
------------------
Typed failures raised by the document wrapper and the reservation
calculator. Every error is a value for the caller to handle; nothing in
the core terminates the process.

Author: KubeReserve Team
Date: 2026-10-19
"""


class KubeReserveError(Exception):
    """Base class for every failure raised by kubereserve."""


class ParseError(KubeReserveError):
    """The input bytes are not a valid kubelet configuration document."""


class SerializeError(KubeReserveError):
    """The in-memory tree holds data the YAML emitter cannot render."""


class PathError(KubeReserveError, KeyError):
    """
    A field path does not resolve, or it crosses a node that is not a mapping.
    """

    def __init__(self, message: str, path=()):
        super().__init__(message)
        self.message = message
        self.path = tuple(path)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class FieldTypeError(KubeReserveError, TypeError):
    """A resolved field holds a value of the wrong scalar type."""

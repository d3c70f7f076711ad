"""
validation.py
-------------
Validation utilities for data source inputs that must fail before any
network activity.
"""
from typing import Optional

from ..exceptions import ConfigurationError, ValidationError
from ..models import TLSMaterial

VALID_METHODS = {"GET", "POST", "HEAD", "PATCH", "DELETE"}


def validate_method(method: str, key: str = "method") -> None:
    if method not in VALID_METHODS:
        raise ValidationError(f"{key} must be GET|POST|HEAD|DELETE|PATCH, got: {method}")


def validate_tls_material(material: Optional[TLSMaterial]) -> None:
    if material is None:
        return
    has_crt = bool(material.client_crt)
    has_key = material.client_key is not None and bool(material.client_key.get_secret_value())
    if has_crt != has_key:
        raise ConfigurationError("Both client_crt and client_key must be specified")

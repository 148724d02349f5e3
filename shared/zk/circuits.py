"""
Circuit Definitions
===================

Circuit configurations and the catalogue of attributes a holder can
selectively disclose.

Version: 2.0.0
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

from shared.zk.models import CircuitType


@dataclass(frozen=True)
class CircuitConfig:
    """Static description of a circuit."""

    name: str
    description: str
    supported_disclosures: tuple[str, ...]


CIRCUIT_CONFIGS: dict[CircuitType, CircuitConfig] = {
    CircuitType.DOCUMENT_VERIFICATION: CircuitConfig(
        name="Document Verification Circuit",
        description="Proves document authenticity without revealing content",
        supported_disclosures=("documentAuthentic", "issuerVerified", "notExpired"),
    ),
    CircuitType.AGE_VERIFICATION: CircuitConfig(
        name="Age Verification Circuit",
        description="Proves age requirements without revealing birth date",
        supported_disclosures=("ageOver18", "ageOver21", "ageOver65"),
    ),
    CircuitType.IDENTITY_VERIFICATION: CircuitConfig(
        name="Identity Verification Circuit",
        description="Proves identity claims without revealing PII",
        supported_disclosures=("identityVerified", "citizenship", "residency"),
    ),
    CircuitType.CREDENTIAL_VERIFICATION: CircuitConfig(
        name="Credential Verification Circuit",
        description="Proves qualifications without revealing specifics",
        supported_disclosures=("degreeVerified", "licenseActive", "certificationValid"),
    ),
}

_CATEGORY_CIRCUITS: dict[str, CircuitType] = {
    "educational": CircuitType.CREDENTIAL_VERIFICATION,
    "professional": CircuitType.CREDENTIAL_VERIFICATION,
    "identity": CircuitType.IDENTITY_VERIFICATION,
    "medical": CircuitType.DOCUMENT_VERIFICATION,
}


def get_circuit_for_category(category: str) -> CircuitType:
    """Get the circuit used for a document category."""
    return _CATEGORY_CIRCUITS.get(category, CircuitType.DOCUMENT_VERIFICATION)


# =============================================================================
# Disclosure Catalogue
# =============================================================================


ValueResolver = Callable[[dict[str, Any]], str | bool | int]


def _always_true(_: dict[str, Any]) -> bool:
    return True


def _citizenship(data: dict[str, Any]) -> str:
    return str(data.get("nationality") or data.get("citizenship") or "Verified")


def _graduation_year(data: dict[str, Any]) -> int | str:
    if data.get("graduationYear"):
        try:
            return int(data["graduationYear"])
        except (TypeError, ValueError):
            pass
    graduation_date = data.get("graduationDate")
    if not graduation_date:
        return "Verified"
    try:
        return date.fromisoformat(str(graduation_date)[:10]).year
    except ValueError:
        return "Verified"


@dataclass(frozen=True)
class DisclosureSpec:
    """How one disclosure key is labelled, valued and seeded."""

    key: str
    label: str
    seed: str
    resolve_value: ValueResolver = _always_true
    description: str = ""

    def seed_for(self, value: str | bool | int) -> str:
        # Graduation year folds the revealed year into its seed
        if self.key == "graduationYear":
            return f"{self.seed}_{value}"
        return self.seed


DISCLOSURE_CATALOG: dict[str, DisclosureSpec] = {
    spec.key: spec
    for spec in (
        # Identity
        DisclosureSpec("ageOver18", "Age Over 18", "age_verification_18", description="Age is over 18"),
        DisclosureSpec("citizenship", "Citizenship", "citizenship_proof", _citizenship),
        DisclosureSpec(
            "identityVerified",
            "Identity Verified",
            "identity_verification",
            description="Identity has been verified",
        ),
        # Educational
        DisclosureSpec(
            "degreeVerified",
            "Degree/Credential Verified",
            "degree_verification",
            description="Degree/diploma has been verified",
        ),
        DisclosureSpec("graduationYear", "Graduation Year", "graduation_year", _graduation_year),
        DisclosureSpec(
            "institutionAccredited",
            "Institution Accredited",
            "institution_accreditation",
            description="Institution is accredited",
        ),
        DisclosureSpec(
            "gradeAboveThreshold",
            "Grade Above Threshold",
            "grade_threshold",
            description="Grade is above threshold",
        ),
        # Professional
        DisclosureSpec(
            "employmentVerified",
            "Employment Verified",
            "employment_verification",
            description="Employment has been verified",
        ),
        DisclosureSpec(
            "licenseActive",
            "License Active",
            "license_active",
            description="Professional license is active",
        ),
        DisclosureSpec(
            "certificationValid",
            "Certification Valid",
            "certification_valid",
            description="Certification is valid",
        ),
        # Medical
        DisclosureSpec(
            "vaccinationVerified",
            "Vaccination Verified",
            "vaccination_verification",
            description="Vaccination status verified",
        ),
        DisclosureSpec(
            "healthCertificateValid",
            "Health Certificate Valid",
            "health_certificate",
            description="Health certificate is valid",
        ),
        # Generic
        DisclosureSpec(
            "documentAuthentic",
            "Document Authentic",
            "document_authenticity",
            description="Document is authentic",
        ),
        DisclosureSpec(
            "issuerVerified",
            "Issuer Verified",
            "issuer_verification",
            description="Issuer has been verified",
        ),
        DisclosureSpec("notExpired", "Not Expired", "expiry_check", description="Document has not expired"),
    )
}

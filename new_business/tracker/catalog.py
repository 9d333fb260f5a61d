"""
Carrier requirement catalog.
Offered as selectable checklist items when a policy is created; the status
logic never reads it.
"""

from typing import Dict, Iterable, List, Tuple

from new_business.errors import ValidationError
from new_business.tracker.models import CarrierName, PolicyType, RequirementTemplate


CUSTOM_REQUIREMENT_DESCRIPTION = "Custom requirement"

_SIGNED_APP = ("Signed Application", "E-signed or wet-signed application.")
_SIGNED_APP_ESIGN = ("Signed Application", "E-signed application is required.")

_STANDARD_CARRIER: Dict[PolicyType, List[Tuple[str, str]]] = {
    PolicyType.AUTO: [_SIGNED_APP],
    PolicyType.HOME: [_SIGNED_APP],
    PolicyType.RENTERS: [_SIGNED_APP_ESIGN],
    PolicyType.UMBRELLA: [_SIGNED_APP],
}

_CATALOG: Dict[CarrierName, Dict[PolicyType, List[Tuple[str, str]]]] = {
    CarrierName.NATIONWIDE: {
        PolicyType.AUTO: [
            _SIGNED_APP,
            ("Prior Proof of Insurance", "Declarations page from previous carrier."),
            ("Driver's License Photos", "Photos of all listed drivers' licenses."),
            ("Signed Draft Form", "If policy is paid via EFT/bank draft."),
            ("VIN Verification", "For full coverage on older vehicles."),
            ("Good Student Proof", "For drivers eligible for good student discount."),
        ],
        PolicyType.HOME: [
            _SIGNED_APP,
            ("Signed Amendments", "Any signed endorsements or policy changes."),
            ("4-Point Inspection", "For homes older than 30 years."),
            ("Wind Mitigation Report", "For potential windstorm discounts."),
            ("Alarm Certificate", "If central station alarm discount is applied."),
            ("Property Photos", "Front, back, and both sides of the dwelling."),
            ("Proof of Updates", "Documentation for updated roof, electrical, plumbing."),
        ],
        PolicyType.RENTERS: [_SIGNED_APP],
        PolicyType.UMBRELLA: [
            _SIGNED_APP,
            ("Underlying Policy Declarations", "Proof of underlying auto and home policies."),
        ],
    },
    CarrierName.PROGRESSIVE: {
        PolicyType.AUTO: [
            _SIGNED_APP_ESIGN,
            ("Payment Confirmation", "Proof of down payment."),
            ("Driver Exclusion Form", "If excluding a household member."),
        ],
        PolicyType.HOME: [
            _SIGNED_APP_ESIGN,
            ("Inspection Photos", "Photos may be requested by underwriting."),
        ],
        PolicyType.RENTERS: [_SIGNED_APP_ESIGN],
        PolicyType.UMBRELLA: [_SIGNED_APP],
    },
    CarrierName.TRAVELERS: {
        PolicyType.AUTO: [
            _SIGNED_APP,
            ("VIN Verification", "Photo of vehicle VIN plate."),
        ],
        PolicyType.HOME: [
            _SIGNED_APP,
            ("Alarm Certificate", "For monitored security system discount."),
            ("Roof Age Documentation", "Proof of roof replacement if newer than dwelling."),
            ("Jewelry Appraisal", "For scheduling high-value jewelry."),
        ],
        PolicyType.RENTERS: [_SIGNED_APP_ESIGN],
        PolicyType.UMBRELLA: [_SIGNED_APP],
    },
    CarrierName.NATIONAL_GENERAL: _STANDARD_CARRIER,
    CarrierName.NC_GRANGE: _STANDARD_CARRIER,
    CarrierName.ALAMANCE_FARMERS: _STANDARD_CARRIER,
    CarrierName.FOREMOST: _STANDARD_CARRIER,
}

COMMON_REQUIREMENTS: List[Tuple[str, str]] = [
    ("Application", "General policy application document."),
    ("Driver Exclusion", "Form to exclude a household member or driver."),
    ("Draft Form", "Authorization for electronic funds transfer (EFT)."),
    ("Prior Insurance", "Proof of prior insurance coverage (e.g., declarations page)."),
    ("Other", "A non-standard or miscellaneous requirement."),
]


def _templates(entries: Iterable[Tuple[str, str]]) -> List[RequirementTemplate]:
    return [RequirementTemplate(name=name, description=description) for name, description in entries]


def carrier_requirements(carrier: CarrierName, policy_type: PolicyType) -> List[RequirementTemplate]:
    return _templates(_CATALOG.get(carrier, {}).get(policy_type, []))


def available_requirements(carrier: CarrierName, policy_type: PolicyType) -> List[RequirementTemplate]:
    """
    Carrier-specific plus common requirements, deduplicated by name and
    sorted alphabetically. A common entry replaces a specific one of the
    same name.
    """
    by_name: Dict[str, RequirementTemplate] = {}
    for template in carrier_requirements(carrier, policy_type) + _templates(COMMON_REQUIREMENTS):
        by_name[template.name] = template
    return sorted(by_name.values(), key=lambda t: t.name.lower())


def custom_requirements(names: Iterable[str]) -> List[RequirementTemplate]:
    """Free-text requirement names, blank and case-insensitive duplicates dropped."""
    seen = set()
    templates = []
    for raw in names:
        name = raw.strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        templates.append(RequirementTemplate(name=name, description=CUSTOM_REQUIREMENT_DESCRIPTION))
    return templates


def select_requirements(
    carrier: CarrierName,
    policy_type: PolicyType,
    selected_names: Iterable[str],
    custom_names: Iterable[str] = (),
) -> List[RequirementTemplate]:
    """
    Requirements for a new policy: the picked catalog entries (alphabetical)
    followed by custom ones.

    Raises:
        ValidationError: if a picked name is not offered for this carrier and type
    """
    available = available_requirements(carrier, policy_type)
    offered = {t.name for t in available}
    selected = set(selected_names)

    unknown = sorted(selected - offered)
    if unknown:
        raise ValidationError(
            f"Not offered for {carrier.value} {policy_type.value}: {', '.join(unknown)}"
        )

    return [t for t in available if t.name in selected] + custom_requirements(custom_names)

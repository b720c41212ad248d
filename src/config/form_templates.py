"""Static form-template registry and assisted-filling format table.

# ─── PURPOSE ───────────────────────────────────────────────────────────
#
# Hand-coded knowledge about the forms users practise on (mock form mode)
# and about how common vault fields should be formatted when pasted into
# real forms (assisted filling).
#
#   1. FORM_TEMPLATES      -- ordered field descriptors per form
#   2. TEMPLATE_RULE_SETS  -- per-template static checks + checklist fields
#   3. FIELD_FORMATS       -- display name / format hint per vault field name
#
# Everything is built once at import time and never mutated.  Lookups go
# through the helper functions at the bottom of each section.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from src.models.forms import (
    FieldDescriptor,
    FormTemplate,
    StaticCheck,
    TemplateRuleSet,
    ValueTransform,
)
from src.utils.errors import TemplateNotFoundError

_UPPER = ValueTransform.UPPER
_LOWER = ValueTransform.LOWER

# Alias lists shared across templates.
_NAME = ("Full Name", "Name")
_DOB = ("Date of Birth", "DOB")
_AADHAAR = ("Aadhaar Number", "Aadhaar")
_MOBILE = ("Mobile", "Phone", "Mobile Number")
_EMAIL = ("Email", "Email Address")
_ADDRESS = ("Address", "Permanent Address")


# ═════════════════════════════════════════════════════════════════════════
# 1. FORM TEMPLATES
# ═════════════════════════════════════════════════════════════════════════

GOVT_EXAM = FormTemplate(
    id="govt-exam",
    name="Government Exam Registration",
    description="SSC, UPSC, Bank PO style registration form",
    fields=(
        FieldDescriptor(
            id="name", label="Candidate Name (as per Aadhaar)", vault_key_aliases=_NAME,
            expected_format="UPPERCASE", value_transform=_UPPER,
            static_warning="Must match Aadhaar exactly",
        ),
        FieldDescriptor(
            id="father", label="Father's Name", vault_key_aliases=("Father's Name",),
            expected_format="UPPERCASE", value_transform=_UPPER,
        ),
        FieldDescriptor(
            id="mother", label="Mother's Name", vault_key_aliases=("Mother's Name",),
            expected_format="UPPERCASE", value_transform=_UPPER,
        ),
        FieldDescriptor(
            id="dob", label="Date of Birth", vault_key_aliases=_DOB,
            expected_format="DD/MM/YYYY", validation_pattern=r"^\d{2}/\d{2}/\d{4}$",
        ),
        FieldDescriptor(
            id="gender", label="Gender", vault_key_aliases=("Gender",),
            placeholder="Male / Female / Other",
        ),
        FieldDescriptor(
            id="aadhaar", label="Aadhaar Number", vault_key_aliases=_AADHAAR,
            expected_format="XXXX XXXX XXXX", validation_pattern=r"^\d{4}\s?\d{4}\s?\d{4}$",
            static_warning="Must be 12 digits",
        ),
        FieldDescriptor(
            id="mobile", label="Mobile Number", vault_key_aliases=_MOBILE,
            expected_format="10 digits", validation_pattern=r"^\d{10}$",
        ),
        FieldDescriptor(
            id="email", label="Email Address", vault_key_aliases=_EMAIL,
            value_transform=_LOWER,
        ),
        FieldDescriptor(id="address", label="Permanent Address", vault_key_aliases=_ADDRESS),
        FieldDescriptor(
            id="pincode", label="PIN Code", vault_key_aliases=("PIN Code", "Pincode"),
            expected_format="6 digits", validation_pattern=r"^\d{6}$",
        ),
    ),
)

COLLEGE_ADMISSION = FormTemplate(
    id="college-admission",
    name="College Admission Form",
    description="University/College enrollment application",
    fields=(
        FieldDescriptor(
            id="name", label="Full Name", vault_key_aliases=_NAME,
            expected_format="UPPERCASE", value_transform=_UPPER,
        ),
        FieldDescriptor(
            id="dob", label="Date of Birth", vault_key_aliases=_DOB, expected_format="DD/MM/YYYY",
        ),
        FieldDescriptor(
            id="10th-marks", label="10th Percentage/CGPA",
            vault_key_aliases=("10th Percentage", "10th Marks", "Class 10 Percentage"),
        ),
        FieldDescriptor(
            id="12th-marks", label="12th Percentage/CGPA",
            vault_key_aliases=("12th Percentage", "12th Marks", "Class 12 Percentage"),
        ),
        FieldDescriptor(
            id="board", label="Board of Education",
            vault_key_aliases=("Board", "Education Board", "10th Board"),
        ),
        FieldDescriptor(
            id="passing-year", label="Year of Passing (12th)",
            vault_key_aliases=("12th Year", "Year of Passing", "Passing Year"),
            expected_format="YYYY", validation_pattern=r"^20\d{2}$",
        ),
        FieldDescriptor(id="aadhaar", label="Aadhaar Number", vault_key_aliases=_AADHAAR),
        FieldDescriptor(id="email", label="Email Address", vault_key_aliases=_EMAIL),
        FieldDescriptor(id="mobile", label="Mobile Number", vault_key_aliases=_MOBILE),
        FieldDescriptor(id="address", label="Correspondence Address", vault_key_aliases=_ADDRESS),
    ),
)

SCHOLARSHIP = FormTemplate(
    id="scholarship",
    name="Scholarship Application",
    description="Merit/Need-based scholarship form",
    fields=(
        FieldDescriptor(
            id="name", label="Applicant Name", vault_key_aliases=_NAME,
            expected_format="UPPERCASE", value_transform=_UPPER,
            static_warning="As per bank account",
        ),
        FieldDescriptor(
            id="father", label="Father's/Guardian's Name", vault_key_aliases=("Father's Name",),
        ),
        FieldDescriptor(id="dob", label="Date of Birth", vault_key_aliases=_DOB),
        FieldDescriptor(
            id="category", label="Category", vault_key_aliases=("Category", "Caste Category"),
            placeholder="General / OBC / SC / ST",
        ),
        FieldDescriptor(id="aadhaar", label="Aadhaar Number", vault_key_aliases=_AADHAAR),
        FieldDescriptor(
            id="bank-account", label="Bank Account Number",
            vault_key_aliases=("Bank Account", "Account Number"),
            static_warning="Verify with passbook",
        ),
        FieldDescriptor(
            id="ifsc", label="IFSC Code", vault_key_aliases=("IFSC", "IFSC Code", "Bank IFSC"),
            expected_format="11 characters", validation_pattern=r"^[A-Z]{4}0[A-Z0-9]{6}$",
        ),
        FieldDescriptor(
            id="income", label="Annual Family Income",
            vault_key_aliases=("Family Income", "Annual Income"),
        ),
        FieldDescriptor(
            id="10th-marks", label="10th Percentage", vault_key_aliases=("10th Percentage", "10th Marks"),
        ),
        FieldDescriptor(
            id="institution", label="Current Institution Name",
            vault_key_aliases=("Institution", "College Name", "School Name"),
        ),
    ),
)

FORM_TEMPLATES: tuple[FormTemplate, ...] = (GOVT_EXAM, COLLEGE_ADMISSION, SCHOLARSHIP)

_TEMPLATES_BY_ID: MappingProxyType[str, FormTemplate] = MappingProxyType(
    {t.id: t for t in FORM_TEMPLATES}
)


def list_templates() -> tuple[FormTemplate, ...]:
    """Return every registered template in display order."""
    return FORM_TEMPLATES


def get_template(template_id: str) -> FormTemplate:
    """Return the template registered under *template_id*.

    Raises
    ------
    TemplateNotFoundError
        If no template has that id.
    """
    try:
        return _TEMPLATES_BY_ID[template_id]
    except KeyError:
        raise TemplateNotFoundError(template_id) from None


# ═════════════════════════════════════════════════════════════════════════
# 2. TEMPLATE RULE SETS
# ═════════════════════════════════════════════════════════════════════════
# Static checks run after the per-field warnings, in the order listed.
# Templates without an entry get the default rule set (no static checks,
# checklist fields "name" / "email" / "mobile").

TEMPLATE_RULE_SETS: MappingProxyType[str, TemplateRuleSet] = MappingProxyType({
    GOVT_EXAM.id: TemplateRuleSet(
        template_id=GOVT_EXAM.id,
        static_checks=(
            StaticCheck(
                field_id="name",
                pattern=r"[A-Z\s]+",
                message="Name should be in UPPERCASE for government forms",
            ),
            StaticCheck(
                field_id="aadhaar",
                pattern=r".{12}",
                message="Aadhaar must be exactly 12 digits",
                ignore_whitespace=True,
            ),
        ),
    ),
})


def get_rule_set(template_id: str) -> TemplateRuleSet:
    """Return the rule set for *template_id*, or the default rule set."""
    rule_set = TEMPLATE_RULE_SETS.get(template_id)
    if rule_set is None:
        return TemplateRuleSet(template_id=template_id)
    return rule_set


# ═════════════════════════════════════════════════════════════════════════
# 3. ASSISTED-FILLING FIELD FORMATS
# ═════════════════════════════════════════════════════════════════════════
# Keyed by the exact vault field name the extraction model produces.


@dataclass(frozen=True)
class FieldFormat:
    """How a vault field should look when pasted into an external form."""

    name: str
    format: str
    warning: str | None = None
    transform: ValueTransform | None = None

    def apply(self, value: str) -> str:
        return self.transform.apply(value) if self.transform else value


_NAME_FORMAT = FieldFormat(
    name="Name as per Document",
    format="UPPERCASE, no special characters",
    warning="Must match Aadhaar/ID exactly",
    transform=_UPPER,
)
_DOB_FORMAT = FieldFormat(
    name="Date of Birth",
    format="DD/MM/YYYY",
    warning="Verify format matches the form requirement",
)

FIELD_FORMATS: MappingProxyType[str, FieldFormat] = MappingProxyType({
    "Full Name": _NAME_FORMAT,
    "Name": _NAME_FORMAT,
    "Father's Name": FieldFormat(
        name="Father's Name", format="UPPERCASE",
        warning="Must match certificate exactly", transform=_UPPER,
    ),
    "Mother's Name": FieldFormat(name="Mother's Name", format="UPPERCASE", transform=_UPPER),
    "Date of Birth": _DOB_FORMAT,
    "DOB": _DOB_FORMAT,
    "Aadhaar Number": FieldFormat(
        name="Aadhaar Number", format="XXXX XXXX XXXX (12 digits with spaces)",
        warning="Must be exactly 12 digits",
    ),
    "PAN Number": FieldFormat(
        name="PAN Number", format="AAAAA0000A (10 characters)",
        warning="Alphanumeric, case sensitive",
    ),
    "Mobile": FieldFormat(name="Mobile Number", format="10 digits, no country code"),
    "Phone": FieldFormat(name="Phone Number", format="10 digits, no country code"),
    "Email": FieldFormat(name="Email Address", format="lowercase@domain.com", transform=_LOWER),
    "Address": FieldFormat(name="Permanent Address", format="As per document, include PIN code"),
    "PIN Code": FieldFormat(name="PIN Code", format="6 digits"),
    "Registration Number": FieldFormat(
        name="Registration/Roll Number", format="Alphanumeric, case sensitive",
        warning="Verify with original certificate",
    ),
})


def get_field_format(field_name: str) -> FieldFormat | None:
    """Return the format entry for an exact vault field name, if any."""
    return FIELD_FORMATS.get(field_name)

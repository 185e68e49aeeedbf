# app/services/court_forms.py
"""
Per-form configuration for the California guardianship filing set.

Each CourtForm carries four tables, all plain data:
  fields        target field -> source field name or Derivation
  widget_names  target field -> AcroForm widget name in the official template
  overlay       target field -> (page, x, y) for drawing onto the template
  sections      reading order for synthesized documents
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

from app.core.config import settings
from app.utils.field_values import Address, Constant, Default, Derivation, FirstOf, ListOf, YesNo

FieldSource = Union[str, Derivation]
Section = Tuple[str, List[Tuple[str, str]]]


@dataclass(frozen=True)
class CourtForm:
    doc_type: str
    title: str
    fields: Dict[str, FieldSource]
    widget_names: Dict[str, str] = field(default_factory=dict)
    overlay: Dict[str, Tuple[int, float, float]] = field(default_factory=dict)
    sections: List[Section] = field(default_factory=list)
    footer_lines: List[str] = field(default_factory=list)


MINOR_NAME = FirstOf("minor_name", "minor_full_name")
MINOR_DOB = FirstOf("minor_dob", "minor_date_of_birth")
COURT_COUNTY = Default("filing_county", settings.DEFAULT_COUNTY)

# header widgets shared by the GC-series templates
GC_HEADER_WIDGETS = {
    "court_county": "CrtCounty_ft[0]",
    "court_branch": "Branch_ft[0]",
    "case_number": "CaseNumber_ft[0]",
    "attorney_city": "AttyCity_ft[0]",
    "attorney_state": "AttyState_ft[0]",
    "attorney_zip": "AttyZip_ft[0]",
}

GC_HEADER_OVERLAY = {
    "attorney_name": (0, 40, 62),
    "court_county": (0, 420, 78),
    "case_number": (0, 430, 150),
}


GC_210 = CourtForm(
    doc_type="GC-210",
    title="PETITION FOR APPOINTMENT OF GUARDIAN OF THE PERSON",
    fields={
        "court_county": COURT_COUNTY,
        "court_branch": "court_branch",
        "case_number": "case_number",
        "attorney_name": "attorney_name",
        "attorney_bar_number": "attorney_bar_number",
        "attorney_phone": "attorney_phone",
        "attorney_email": "attorney_email",
        "attorney_city": "attorney_city",
        "attorney_state": Default("attorney_state", settings.DEFAULT_STATE),
        "attorney_zip": "attorney_zip",
        "petitioner_name": "guardian_name",
        "minor_name": MINOR_NAME,
        "minor_dob": MINOR_DOB,
        "minor_gender": "minor_gender",
        "minor_address": Address.of("minor"),
        "guardian_name": "guardian_name",
        "guardian_relationship": "guardian_relationship",
        "guardian_address": Address.of("guardian"),
        "guardian_phone": "guardian_phone",
        "mother_name": FirstOf("mother_name", "mother_full_name"),
        "mother_address": "mother_address",
        "mother_status": "mother_status",
        "father_name": FirstOf("father_name", "father_full_name"),
        "father_address": "father_address",
        "father_status": "father_status",
    },
    widget_names=dict(GC_HEADER_WIDGETS),
    overlay={
        **GC_HEADER_OVERLAY,
        "petitioner_name": (0, 160, 228),
        "minor_name": (0, 150, 262),
        "minor_dob": (0, 150, 277),
        "minor_gender": (0, 330, 277),
        "minor_address": (0, 150, 292),
        "guardian_name": (0, 150, 332),
        "guardian_relationship": (0, 180, 347),
        "guardian_address": (0, 150, 362),
        "guardian_phone": (0, 150, 377),
        "mother_name": (0, 150, 417),
        "mother_address": (0, 150, 432),
        "father_name": (0, 150, 462),
        "father_address": (0, 150, 477),
    },
    sections=[
        ("ATTORNEY OR PARTY WITHOUT ATTORNEY", [
            ("Name", "attorney_name"),
            ("State Bar No.", "attorney_bar_number"),
            ("Telephone", "attorney_phone"),
            ("Email", "attorney_email"),
        ]),
        ("1. PETITIONER", [
            ("a. Name", "petitioner_name"),
        ]),
        ("2. MINOR INFORMATION", [
            ("a. Name of minor", "minor_name"),
            ("b. Date of birth", "minor_dob"),
            ("c. Gender", "minor_gender"),
            ("d. Address", "minor_address"),
        ]),
        ("3. PROPOSED GUARDIAN", [
            ("a. Name", "guardian_name"),
            ("b. Relationship to minor", "guardian_relationship"),
            ("c. Address", "guardian_address"),
            ("d. Telephone", "guardian_phone"),
        ]),
        ("4. PARENTS", [
            ("a. Mother", "mother_name"),
            ("   Address", "mother_address"),
            ("   Status", "mother_status"),
            ("b. Father", "father_name"),
            ("   Address", "father_address"),
            ("   Status", "father_status"),
        ]),
    ],
    footer_lines=["Date: ____________________", "Signature of petitioner: ______________________________"],
)


GC_220 = CourtForm(
    doc_type="GC-220",
    title="FINDINGS AND ORDERS - SPECIAL IMMIGRANT JUVENILE STATUS",
    fields={
        "court_county": COURT_COUNTY,
        "case_number": "case_number",
        "minor_name": MINOR_NAME,
        "minor_dob": MINOR_DOB,
        "minor_current_country": Default("minor_current_country", "United States"),
        "sijs_best_interest": YesNo("sijs_best_interest"),
        "best_interest_explanation": FirstOf("sijs_best_interest_explanation", "best_interest_explanation"),
        "mother_reunification": "mother_reunification",
        "mother_reunification_explanation": "mother_reunification_explanation",
        "father_reunification": "father_reunification",
        "father_reunification_explanation": "father_reunification_explanation",
        "return_harmful": YesNo("return_harmful"),
        "harm_explanation": FirstOf("sijs_harm_explanation", "return_harmful_explanation"),
    },
    widget_names=dict(GC_HEADER_WIDGETS),
    overlay={
        **GC_HEADER_OVERLAY,
        "minor_name": (0, 180, 230),
        "minor_dob": (0, 420, 230),
        "best_interest_explanation": (0, 60, 290),
        "mother_reunification_explanation": (0, 60, 350),
        "father_reunification_explanation": (0, 60, 380),
        "harm_explanation": (0, 60, 440),
    },
    sections=[
        ("IN THE MATTER OF", [
            ("Minor", "minor_name"),
            ("Date of birth", "minor_dob"),
            ("Current country of residence", "minor_current_country"),
        ]),
        ("1. BEST INTEREST OF THE MINOR", [
            ("Finding requested", "sijs_best_interest"),
            ("Explanation", "best_interest_explanation"),
        ]),
        ("2. REUNIFICATION WITH PARENTS IS NOT VIABLE", [
            ("Mother", "mother_reunification"),
            ("Explanation", "mother_reunification_explanation"),
            ("Father", "father_reunification"),
            ("Explanation", "father_reunification_explanation"),
        ]),
        ("3. RETURN TO COUNTRY OF ORIGIN", [
            ("Not in minor's best interest", "return_harmful"),
            ("Explanation", "harm_explanation"),
        ]),
    ],
    footer_lines=["Date: ____________________", "JUDGE OF THE SUPERIOR COURT"],
)


GC_210CA = CourtForm(
    doc_type="GC-210CA",
    title="GUARDIANSHIP PETITION - CHILD INFORMATION ATTACHMENT",
    fields={
        "court_county": COURT_COUNTY,
        "case_number": "case_number",
        "attached_to": Constant("GC-210"),
        "minor_name": MINOR_NAME,
        "minor_dob": MINOR_DOB,
        "minor_birthplace": FirstOf("minor_birthplace", "country_of_birth"),
        "minor_previous_addresses": ListOf("minor_previous_addresses"),
        "is_citizen": YesNo("is_citizen"),
        "immigration_status": "immigration_status",
        "a_number": "a_number",
        "minor_school": "minor_school",
        "grade_level": "grade_level",
    },
    widget_names={
        "case_number": "CaseNumber_ft[0]",
        "minor_name": "AllChildNames[0]",
    },
    overlay={
        "case_number": (0, 430, 80),
        "minor_name": (0, 150, 140),
        "minor_dob": (0, 150, 160),
        "minor_birthplace": (0, 350, 160),
        "is_citizen": (0, 200, 200),
        "immigration_status": (0, 200, 220),
        "a_number": (0, 450, 220),
        "minor_school": (0, 150, 260),
        "grade_level": (0, 450, 260),
        "minor_previous_addresses": (0, 60, 310),
    },
    sections=[
        ("ATTACHMENT", [
            ("Attachment to", "attached_to"),
        ]),
        ("1. CHILD", [
            ("a. Name", "minor_name"),
            ("b. Date of birth", "minor_dob"),
            ("c. Place of birth", "minor_birthplace"),
        ]),
        ("2. CITIZENSHIP AND IMMIGRATION", [
            ("a. U.S. citizen", "is_citizen"),
            ("b. Immigration status", "immigration_status"),
            ("c. A-Number", "a_number"),
        ]),
        ("3. SCHOOL", [
            ("a. School", "minor_school"),
            ("b. Grade level", "grade_level"),
        ]),
        ("4. RESIDENCE HISTORY", [
            ("Previous addresses", "minor_previous_addresses"),
        ]),
    ],
)


FL_105 = CourtForm(
    doc_type="FL-105",
    title="DECLARATION UNDER UNIFORM CHILD CUSTODY JURISDICTION AND ENFORCEMENT ACT (UCCJEA)",
    fields={
        "court_county": COURT_COUNTY,
        "case_number": "case_number",
        "declarant_name": "guardian_name",
        "declarant_phone": "guardian_phone",
        "declarant_email": "guardian_email",
        "minor_name": MINOR_NAME,
        "minor_dob": MINOR_DOB,
        "country_of_birth": FirstOf("country_of_birth", "minor_birthplace"),
        "minor_current_address": Address.of("minor"),
        "residence_duration": "residence_duration",
        "residence_from": "residence_from",
        "residence_to": Default("residence_to", "Present"),
        "previous_addresses": ListOf("minor_previous_addresses"),
        "other_court_cases": Default("other_court_cases", "None"),
        "domestic_violence": Default("domestic_violence", "None"),
    },
    widget_names={
        "court_county": "CrtCounty[0]",
        "case_number": "CaseNumber[0]",
        "declarant_name": "Name[0]",
        "declarant_phone": "Phone[0]",
        "declarant_email": "Email[0]",
    },
    overlay={
        "declarant_name": (0, 40, 62),
        "court_county": (0, 420, 78),
        "case_number": (0, 430, 150),
        "minor_name": (0, 100, 240),
        "minor_dob": (0, 330, 240),
        "country_of_birth": (0, 460, 240),
        "minor_current_address": (0, 100, 280),
        "residence_from": (0, 100, 300),
        "residence_to": (0, 250, 300),
        "other_court_cases": (0, 100, 380),
        "domestic_violence": (0, 100, 420),
    },
    sections=[
        ("DECLARANT", [
            ("Name", "declarant_name"),
            ("Telephone", "declarant_phone"),
            ("Email", "declarant_email"),
        ]),
        ("1. CHILD INFORMATION", [
            ("Name", "minor_name"),
            ("Date of birth", "minor_dob"),
            ("Country of birth", "country_of_birth"),
        ]),
        ("2. RESIDENCE INFORMATION (LAST 5 YEARS)", [
            ("Current address", "minor_current_address"),
            ("Time at address", "residence_duration"),
            ("From", "residence_from"),
            ("To", "residence_to"),
            ("Previous addresses", "previous_addresses"),
        ]),
        ("3. OTHER PROCEEDINGS", [
            ("Custody proceedings", "other_court_cases"),
            ("Domestic violence orders", "domestic_violence"),
        ]),
    ],
    footer_lines=["I declare under penalty of perjury under the laws of the State of California "
                  "that the foregoing is true and correct.",
                  "Date: ____________________", "Signature: ______________________________"],
)


GC_020 = CourtForm(
    doc_type="GC-020",
    title="NOTICE OF HEARING - GUARDIANSHIP",
    fields={
        "court_county": COURT_COUNTY,
        "court_address": "court_address",
        "case_number": "case_number",
        "minor_name": MINOR_NAME,
        "petitioner_name": "guardian_name",
        "hearing_date": "hearing_date",
        "hearing_time": "hearing_time",
        "hearing_department": "hearing_department",
        "hearing_room": "hearing_room",
    },
    widget_names=dict(GC_HEADER_WIDGETS),
    overlay={
        **GC_HEADER_OVERLAY,
        "minor_name": (0, 100, 250),
        "petitioner_name": (0, 170, 270),
        "hearing_date": (0, 100, 330),
        "hearing_time": (0, 100, 350),
        "hearing_department": (0, 120, 370),
        "hearing_room": (0, 100, 390),
        "court_address": (0, 100, 410),
    },
    sections=[
        ("NOTICE IS GIVEN THAT", [
            ("Minor", "minor_name"),
            ("Petitioner / proposed guardian", "petitioner_name"),
        ]),
        ("HEARING DETAILS", [
            ("Date", "hearing_date"),
            ("Time", "hearing_time"),
            ("Department", "hearing_department"),
            ("Room", "hearing_room"),
            ("Court address", "court_address"),
        ]),
    ],
    footer_lines=["Note: Hearing date and time will be set by the court clerk.", "Clerk of the Court"],
)


COURT_FORMS: Dict[str, CourtForm] = {
    form.doc_type: form for form in (GC_210, GC_220, GC_210CA, FL_105, GC_020)
}

DOCUMENT_TYPES = tuple(COURT_FORMS)

# =============================================================================
# lib/airtable_schema.py - Airtable Base Layout
# =============================================================================
# Table names, table IDs and field IDs for the ClinicalRxQ base.
#
# The proxy endpoints address tables and fields by NAME. The dev inspector can
# read with returnFieldsByFieldId=true and relabels the columns through
# FIELD_IDS, so a renamed column in Airtable shows up as a missing label.
# =============================================================================

# -----------------------------------------------------------------------------
# Table names
# -----------------------------------------------------------------------------

CLINICAL_PROGRAMS = "ClinicalPrograms"
TRAINING_MODULES = "TrainingModules"
PROTOCOL_MANUALS = "ProtocolManuals"
DOCUMENTATION_FORMS = "DocumentationForms"
ADDITIONAL_RESOURCES = "AdditionalResources"
PATIENT_HANDOUTS = "PatientHandouts"
CLINICAL_GUIDELINES = "ClinicalGuidelines"
MEDICAL_BILLING_RESOURCES = "MedicalBillingResources"

# -----------------------------------------------------------------------------
# Table IDs (alias -> tbl...)
# -----------------------------------------------------------------------------

TABLE_IDS: dict[str, str] = {
    "programs": "tblXsjw9EvEX1JnCy",
    "members": "tblxoJz15zMr6CeeV",
    "trainingModules": "tblrXWJ8gC6G3L2wG",
    "protocolManuals": "tblh5Hqrd512J5C9e",
    "documentationForms": "tblFahap8ERhQk0p5",
    "additionalResources": "tbldWUMJBg4nuq6rQ",
    "patientHandouts": "tblF0sNzTgGF4EBga",
    "clinicalGuidelines": "tblfIcFCFpVlOpsGr",
    "medicalBillingResources": "tbly4NjBbcptuc9G5",
}

# -----------------------------------------------------------------------------
# Field IDs by table alias
# -----------------------------------------------------------------------------

FIELD_IDS: dict[str, dict[str, str]] = {
    "programs": {
        "programName": "fldZMC178eiIyTq3w",
        "programDescription": "fldVNSdftxLraYp6P",
        "programOverview": "fldNRUwiQcesXso0s",
        "experienceLevel": "fldAxTeupBBeP9XDb",
        "programSlug": "fldqrANZRsEuolDR6",
    },
    "trainingModules": {
        "moduleName": "fldGNfcyijbCckJ77",
        "moduleLength": "fldCbTTBwwjxp6z7d",
        "moduleFile": "fld7FOPvfmAxWd1TI",
        "moduleLink": "fldKyw9533skmVv3p",
    },
    "protocolManuals": {
        "protocolName": "fldBy2Thpsn4AlIbU",
        "protocolFile": "fldi28XFMhDfcosX2",
        "fileLink": "fld1fFDUsAnnAmmLo",
    },
    "documentationForms": {
        "formName": "fldk7HpJIGHv3VOc4",
        "formFile": "fldrRhyCyGgUpWuIG",
        "formCategory": "fldfuX4T5a7NBb9ey",
        "formLink": "fldGi4HEH9nq4BLVy",
    },
    "additionalResources": {
        "resourceName": "fldPhWKcmTg8mcNUz",
        "resourceFile": "fldOahqDBWH463d6y",
        "resourceLink": "fldTqxYoEEFAw0Y0p",
    },
}


def resolve_table(name_or_alias: str) -> str:
    """
    Resolve a table alias ("programs") to its table ID.

    Anything that isn't a known alias (a table name like "Members" or an
    explicit tbl... ID) is passed through unchanged.
    """
    key = (name_or_alias or "").strip()
    return TABLE_IDS.get(key, key)


def field_labels(name_or_alias: str) -> dict[str, str]:
    """
    Field ID -> field name for a table alias or table ID.

    Returns {} for tables without a field map.
    """
    key = (name_or_alias or "").strip()
    for alias, table_id in TABLE_IDS.items():
        if key in (alias, table_id):
            return {field_id: name for name, field_id in FIELD_IDS.get(alias, {}).items()}
    return {}

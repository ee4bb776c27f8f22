"""
Diagnosis and Procedure Coding for Inpatient Claims.

Fills the diagnosis, external cause and procedure slots of a claim header
from the encounter's reason, the patient's active conditions and the
encounter's procedures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from src.core.enums import ICD10_VERSION_CODE, PresentOnAdmission
from src.services.rif.code_mapper import CodeMapper, CodeMappers
from src.services.rif.formatting import format_rif_date
from src.services.rif.health_record import Encounter, Patient, Procedure
from src.services.rif.structure import (
    DIAGNOSIS_FIELDS,
    EXTERNAL_CAUSE_FIELDS,
    PROCEDURE_FIELDS,
    InpatientRecord,
)
from src.services.rif.structure import InpatientField as F


@dataclass
class CodingResult:
    """Codes placed on a claim header."""

    reason_code: Optional[str] = None
    principal_diagnosis: Optional[str] = None
    diagnosis_codes: list[str] = field(default_factory=list)
    procedure_codes: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the claim has nothing to report and must be dropped."""
        return self.reason_code is None and not self.diagnosis_codes and not self.procedure_codes


def _poa(code: str, admission_codes: list[str]) -> str:
    return (PresentOnAdmission.YES if code in admission_codes else PresentOnAdmission.NO).value


class DiagnosisProcedureMapper:
    """Maps clinical content of an encounter onto the RIF coding fields."""

    def __init__(self, mappers: CodeMappers):
        self.conditions: CodeMapper = mappers.condition
        self.procedures: CodeMapper = mappers.procedure
        self.drg: CodeMapper = mappers.drg
        self.external_causes: CodeMapper = mappers.external_cause

    def diagnosis_codes(self, patient: Patient, when: datetime) -> list[str]:
        """Mapped codes of the conditions active at ``when``, without duplicates."""
        mapped: list[str] = []
        for code in patient.active_conditions(when):
            if self.conditions.can_map(code):
                icd_code = self.conditions.map(code, patient, allow_fallback=True)
                if icd_code not in mapped:
                    mapped.append(icd_code)
        return mapped

    def _procedure_code(self, patient: Patient, procedure: Procedure) -> Optional[str]:
        for code in procedure.codes:
            if self.procedures.can_map(code):
                return self.procedures.map(code, patient, allow_fallback=True)
        return None

    def apply(self, patient: Patient, encounter: Encounter, record: InpatientRecord) -> CodingResult:
        """Set the coding fields of ``record`` and report what was coded."""
        result = CodingResult()

        if encounter.reason is not None and self.conditions.can_map(encounter.reason):
            result.reason_code = self.conditions.map(encounter.reason, patient, allow_fallback=True)
            record.set(F.PRNCPAL_DGNS_CD, result.reason_code)
            record.set(F.ADMTG_DGNS_CD, result.reason_code)

        admission_codes = self.diagnosis_codes(patient, encounter.start)
        current_codes = self.diagnosis_codes(patient, encounter.stop)
        for (code_field, version_field, poa_field), dx_code in zip(DIAGNOSIS_FIELDS, current_codes):
            record.set(code_field, dx_code)
            record.set(version_field, ICD10_VERSION_CODE)
            record.set(poa_field, _poa(dx_code, admission_codes))
            result.diagnosis_codes.append(dx_code)

        if F.PRNCPAL_DGNS_CD not in record and result.diagnosis_codes:
            record.set(F.PRNCPAL_DGNS_CD, result.diagnosis_codes[0])

        principal = record.get(F.PRNCPAL_DGNS_CD)
        result.principal_diagnosis = principal
        if principal is not None:
            if self.drg.can_map(principal):
                record.set(F.CLM_DRG_CD, self.drg.map(principal, patient))
            self._set_external_causes(patient, principal, admission_codes, record)

        coded = [(p, self._procedure_code(patient, p)) for p in encounter.procedures]
        coded = [(p, px_code) for p, px_code in coded if px_code is not None]
        for (code_field, version_field, date_field), (procedure, px_code) in zip(PROCEDURE_FIELDS, coded):
            record.set(code_field, px_code)
            record.set(version_field, ICD10_VERSION_CODE)
            record.set(date_field, format_rif_date(procedure.start))
            result.procedure_codes.append(px_code)

        return result

    def _set_external_causes(
        self,
        patient: Patient,
        principal: str,
        admission_codes: list[str],
        record: InpatientRecord,
    ) -> None:
        # Drawn independently: the two fields may carry different causes.
        if not self.external_causes.can_map(principal):
            return
        poa = _poa(principal, admission_codes)
        code_field, version_field, poa_field = EXTERNAL_CAUSE_FIELDS[0]
        record.set(code_field, self.external_causes.map(principal, patient, allow_fallback=True))
        record.set(version_field, ICD10_VERSION_CODE)
        record.set(poa_field, poa)
        record.set(F.FST_DGNS_E_CD, self.external_causes.map(principal, patient, allow_fallback=True))
        record.set(F.FST_DGNS_E_VRSN_CD, ICD10_VERSION_CODE)

"""Official KP forms generated by the backend and saved to disk."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .models import Stage

if TYPE_CHECKING:
    from .client import LuponClient

logger = logging.getLogger(__name__)


class PdfForm(str, Enum):
    """Each value is the route under ``/api/pdf/``."""

    COMPLAINT = "generate-complaint"
    NOTICE_OF_HEARING = "generate-notice-hearing"
    SUMMONS = "generate-summons"
    NOTICE_CONSTITUTION_PANGKAT = "generate-notice-constitution-pangkat"
    NOTICE_CHOOSE_PANGKAT = "generate-notice-choose-pangkat"
    SETTLEMENT = "generate-settlement"
    CERTIFICATE_TO_FILE_ACTION = "generate-cfa"
    MEDIATION_HEARING = "generate-mediation-hearing"
    CONCILIATION_HEARING = "generate-conciliation-hearing"
    ARBITRATION_HEARING = "generate-arbitration-hearing"

    @property
    def kp_number(self) -> str | None:
        return KP_FORM_NUMBERS.get(self)

    @property
    def slug(self) -> str:
        return self.value.removeprefix("generate-")


KP_FORM_NUMBERS: dict[PdfForm, str] = {
    PdfForm.COMPLAINT: "7",
    PdfForm.NOTICE_OF_HEARING: "8",
    PdfForm.SUMMONS: "9",
    PdfForm.NOTICE_CONSTITUTION_PANGKAT: "10",
    PdfForm.NOTICE_CHOOSE_PANGKAT: "11",
    PdfForm.SETTLEMENT: "16",
    PdfForm.CERTIFICATE_TO_FILE_ACTION: "20-B",
}

_HEARING_FORMS = {
    Stage.MEDIATION: PdfForm.MEDIATION_HEARING,
    Stage.CONCILIATION: PdfForm.CONCILIATION_HEARING,
    Stage.ARBITRATION: PdfForm.ARBITRATION_HEARING,
}


def hearing_form(stage: Stage) -> PdfForm:
    """Minutes-of-hearing form for a stage."""
    return _HEARING_FORMS[stage]


def form_filename(form: PdfForm, case_id: Any) -> str:
    prefix = f"kp-form-{form.kp_number.lower()}-" if form.kp_number else ""
    return f"{prefix}{form.slug}-{case_id}.pdf"


async def download_form(
    client: LuponClient,
    form: PdfForm,
    payload: dict[str, Any],
    *,
    case_id: Any,
    output_dir: Path | None = None,
) -> Path:
    """
    Generate ``form`` for a case and write it under ``output_dir``.

    Returns:
        Path of the written PDF
    """
    content = await client.generate_pdf(form.value, payload)
    directory = Path(output_dir or client.settings.pdf_output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / form_filename(form, case_id)
    target.write_bytes(content)
    logger.info("Saved %s for case %s to %s (%d bytes)", form.name, case_id, target, len(content))
    return target

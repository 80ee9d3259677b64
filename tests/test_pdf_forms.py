import time

import jwt
import pytest
import respx
from lupon_client.auth import TokenStore
from lupon_client.client import LuponClient
from lupon_client.config import Settings
from lupon_client.models import Stage
from lupon_client.pdf_forms import PdfForm, download_form, form_filename, hearing_form

BASE = "https://api.lupon.test"


def test_kp_numbers_and_filenames():
    assert PdfForm.SUMMONS.kp_number == "9"
    assert PdfForm.CERTIFICATE_TO_FILE_ACTION.kp_number == "20-B"
    assert form_filename(PdfForm.SUMMONS, 2025001) == "kp-form-9-summons-2025001.pdf"
    assert form_filename(PdfForm.CERTIFICATE_TO_FILE_ACTION, 2025001) == "kp-form-20-b-cfa-2025001.pdf"
    assert form_filename(PdfForm.MEDIATION_HEARING, 2025001) == "mediation-hearing-2025001.pdf"


def test_hearing_form_per_stage():
    assert hearing_form(Stage.ARBITRATION) is PdfForm.ARBITRATION_HEARING


@pytest.mark.asyncio
@respx.mock
async def test_download_form_writes_pdf(tmp_path):
    token = jwt.encode(
        {"id": 1, "email": "sec@lupon.test", "role": "secretary", "exp": int(time.time()) + 3600},
        "secret",
        algorithm="HS256",
    )
    client = LuponClient(
        Settings(api_base_url=BASE, pdf_output_dir=tmp_path / "default"), TokenStore(token=token)
    )
    respx.post(f"{BASE}/api/pdf/generate-settlement").respond(200, content=b"%PDF-1.7 settlement")

    target = await download_form(
        client, PdfForm.SETTLEMENT, {"caseNo": "2025001"}, case_id=2025001
    )

    assert target == tmp_path / "default" / "kp-form-16-settlement-2025001.pdf"
    assert target.read_bytes() == b"%PDF-1.7 settlement"

    other = await download_form(
        client, PdfForm.SETTLEMENT, {}, case_id=2025002, output_dir=tmp_path / "out"
    )
    assert other.parent == tmp_path / "out"
    await client.aclose()

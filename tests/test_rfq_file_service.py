"""Drawings and documents attached to RFQs."""

import pytest

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.file_type import RfqFileType
from app.models.enums.rfq_status import RfqStatus
from app.services.rfq.rfq_file_service import (
    classify_rfq_file,
    download_rfq_file,
    list_rfq_files,
    upload_rfq_files,
)

from tests.factories import make_rfq

DRAWING = ("bracket-rev2.STEP", b"ISO-10303-21;\nHEADER;")
SPEC_SHEET = ("tolerances.xlsx", b"PK\x03\x04 sheet")


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("part.step", RfqFileType.step),
        ("part.STP", RfqFileType.step),
        ("drawing.pdf", RfqFileType.pdf),
        ("bom.xls", RfqFileType.excel),
        ("photo.png", RfqFileType.image),
    ],
)
def test_classify_rfq_file(filename, expected):
    assert classify_rfq_file(filename) == expected


def test_unknown_rfq_file_type_is_rejected():
    with pytest.raises(AppException) as exc:
        classify_rfq_file("model.dwg")
    assert exc.value.error_code == ErrorCode.RFQ_FILE_INVALID


async def test_customer_attaches_and_downloads_drawings(db, admin, customer):
    rfq = await make_rfq(db, customer)

    created = await upload_rfq_files(db, rfq.id, [DRAWING, SPEC_SHEET], customer)

    assert [f.file_type for f in created] == [RfqFileType.step, RfqFileType.excel]
    assert created[0].content_type == "application/step"
    assert created[0].uploaded_by_id == customer.id

    listed = await list_rfq_files(db, rfq.id, admin)
    assert {f.file_name for f in listed} == {"bracket-rev2.STEP", "tolerances.xlsx"}

    content, rfq_file = await download_rfq_file(db, rfq.id, created[0].id, admin)
    assert content == DRAWING[1]
    assert rfq_file.file_name == "bracket-rev2.STEP"


async def test_other_customers_cannot_reach_attachments(db, customer, other_customer):
    rfq = await make_rfq(db, customer)
    created = await upload_rfq_files(db, rfq.id, [DRAWING], customer)

    with pytest.raises(AppException) as exc:
        await list_rfq_files(db, rfq.id, other_customer)
    assert exc.value.error_code == ErrorCode.RFQ_NOT_FOUND

    with pytest.raises(AppException) as exc:
        await download_rfq_file(db, rfq.id, created[0].id, other_customer)
    assert exc.value.status_code == 404

    with pytest.raises(AppException) as exc:
        await upload_rfq_files(db, rfq.id, [DRAWING], other_customer)
    assert exc.value.status_code == 404


async def test_file_must_belong_to_the_rfq(db, customer):
    rfq = await make_rfq(db, customer)
    other_rfq = await make_rfq(db, customer)
    created = await upload_rfq_files(db, rfq.id, [DRAWING], customer)

    with pytest.raises(AppException) as exc:
        await download_rfq_file(db, other_rfq.id, created[0].id, customer)
    assert exc.value.error_code == ErrorCode.RFQ_FILE_NOT_FOUND


async def test_one_bad_attachment_rejects_the_batch(db, customer):
    rfq = await make_rfq(db, customer)

    with pytest.raises(AppException) as exc:
        await upload_rfq_files(db, rfq.id, [DRAWING, ("notes.txt", b"hello")], customer)
    assert exc.value.error_code == ErrorCode.RFQ_FILE_INVALID
    assert await list_rfq_files(db, rfq.id, customer) == []


async def test_closed_rfq_only_accepts_admin_attachments(db, admin, customer):
    rfq = await make_rfq(db, customer, status=RfqStatus.declined)

    with pytest.raises(AppException) as exc:
        await upload_rfq_files(db, rfq.id, [DRAWING], customer)
    assert exc.value.error_code == ErrorCode.RFQ_INVALID_STATE

    created = await upload_rfq_files(db, rfq.id, [DRAWING], admin)
    assert created[0].uploaded_by_id == admin.id

import asyncio
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from _rsge_stub import fixture_text, make_client, soap_fault, soap_response  # noqa: E402

from app.rsge_client.exceptions import (  # noqa: E402
    ApplicationError,
    MissingFieldError,
    ParseError,
    SoapFaultError,
)
from app.rsge_client.models import (  # noqa: E402
    Credentials,
    WaybillGood,
    WaybillInput,
    WaybillStatus,
    WaybillType,
)

CREDS = Credentials("svc-user", "svc-pass")

WAYBILL = WaybillInput(
    buyer_tin="206322102",
    buyer_name="შპს ალფა",
    start_address="თბილისი, რუსთაველის 1",
    end_address="ბათუმი, ჭავჭავაძის 5",
    goods=(WaybillGood(name="Item", quantity=2, price=10, unit_id=5),),
)


def test_save_waybill_returns_id_and_number():
    client, handler = make_client({
        "save_waybill": soap_response(
            "save_waybill", "<ID>123</ID><WAYBILL_NUMBER>WB-001</WAYBILL_NUMBER>"
        ),
    })

    result = asyncio.run(client.save_waybill(CREDS, WAYBILL))

    assert result.waybill_id == "123"
    assert result.waybill_number == "WB-001"
    assert result.to_dict() == {"waybillId": "123", "waybillNumber": "WB-001"}

    body = handler.body_of("save_waybill")
    assert "<su>svc-user</su>" in body
    assert "<sp>svc-pass</sp>" in body
    assert "<GOOD><ID>0</ID><W_NAME>Item</W_NAME><UNIT_ID>5</UNIT_ID>" in body
    assert "<QUANTITY>2</QUANTITY><PRICE>10</PRICE>" in body
    assert "<TYPE>1</TYPE>" in body
    assert "<STATUS>0</STATUS>" in body


def test_save_waybill_soap_fault_propagates():
    client, _ = make_client({"save_waybill": soap_fault("Invalid session")})

    with pytest.raises(SoapFaultError) as exc_info:
        asyncio.run(client.save_waybill(CREDS, WAYBILL))
    assert exc_info.value.message == "Invalid session"


def test_save_waybill_application_error_keeps_remote_code():
    client, _ = make_client({
        "save_waybill": soap_response(
            "save_waybill", "<error_code>5</error_code><error_text>Unauthorized</error_text>"
        ),
    })

    with pytest.raises(ApplicationError) as exc_info:
        asyncio.run(client.save_waybill(CREDS, WAYBILL))
    assert exc_info.value.code == "5"
    assert exc_info.value.message == "Unauthorized"


def test_save_waybill_without_number_is_missing_field():
    client, _ = make_client({
        "save_waybill": soap_response("save_waybill", "<ID>123</ID><WAYBILL_NUMBER></WAYBILL_NUMBER>"),
    })

    with pytest.raises(MissingFieldError) as exc_info:
        asyncio.run(client.save_waybill(CREDS, WAYBILL))
    assert exc_info.value.field == "WAYBILL_NUMBER"
    assert isinstance(exc_info.value, ParseError)


def test_save_waybill_sends_custom_type_and_driver():
    waybill = WaybillInput(
        buyer_tin="206322102",
        buyer_name="Buyer",
        start_address="A",
        end_address="B",
        goods=(),
        type=WaybillType.RETURN,
        status=WaybillStatus.ACTIVE,
        driver_tin="01008033976",
        car_number="AA-123-BB",
    )
    client, handler = make_client({
        "save_waybill": soap_response("save_waybill", "<ID>1</ID><WAYBILL_NUMBER>N1</WAYBILL_NUMBER>"),
    })

    asyncio.run(client.save_waybill(CREDS, waybill))

    body = handler.body_of("save_waybill")
    assert "<TYPE>4</TYPE>" in body
    assert "<STATUS>1</STATUS>" in body
    assert "<DRIVER_TIN>01008033976</DRIVER_TIN>" in body
    assert "<CAR_NUMBER>AA-123-BB</CAR_NUMBER>" in body


@pytest.mark.parametrize("operation, method", [
    ("send_waybill", "send_waybill"),
    ("delete_waybill", "del_waybill"),
    ("close_waybill", "close_waybill"),
])
def test_lifecycle_operations_return_true(operation, method):
    client, handler = make_client({method: soap_response(method, "<error_code>0</error_code>")})

    assert asyncio.run(getattr(client, operation)(CREDS, "901")) is True
    assert handler.methods() == [method]
    assert "<ID>901</ID>" in handler.body_of(method)


def test_send_waybill_application_error():
    client, _ = make_client({
        "send_waybill": soap_response(
            "send_waybill", "<error_code>-1003</error_code><error_text>ზედნადები ვერ მოიძებნა</error_text>"
        ),
    })

    with pytest.raises(ApplicationError) as exc_info:
        asyncio.run(client.send_waybill(CREDS, "999"))
    assert exc_info.value.code == "-1003"
    assert exc_info.value.message == "ზედნადები ვერ მოიძებნა"


def test_get_waybills_parses_fixture_in_order():
    client, handler = make_client({"get_waybills": fixture_text("get_waybills_response.xml")})

    items = asyncio.run(client.get_waybills(CREDS, "2026-10-01", "2026-10-31"))

    assert [item.id for item in items] == [901, 902, 903]
    assert items[0].number == "0123456781"
    assert items[1].number == ""
    assert items[1].buyer_name == "Tom & Jerry LLC"
    assert [item.status for item in items] == ["1", "0", "-1"]

    body = handler.body_of("get_waybills")
    assert "<DT_F>2026-10-01</DT_F>" in body
    assert "<DT_T>2026-10-31</DT_T>" in body
    assert "<ITYPE>0</ITYPE>" in body
    assert "<ISTATUS>-1</ISTATUS>" in body


def test_get_waybills_empty_result_is_empty_list():
    client, _ = make_client({"get_waybills": soap_response("get_waybills", "<WAYBILL_LIST></WAYBILL_LIST>")})
    assert asyncio.run(client.get_waybills(CREDS, "2026-10-01", "2026-10-31")) == []


def test_get_waybills_block_without_id_is_missing_field():
    client, _ = make_client({
        "get_waybills": soap_response(
            "get_waybills", "<WAYBILL_LIST><WAYBILL><WAYBILL_NUMBER>1</WAYBILL_NUMBER></WAYBILL></WAYBILL_LIST>"
        ),
    })

    with pytest.raises(MissingFieldError) as exc_info:
        asyncio.run(client.get_waybills(CREDS, "2026-10-01", "2026-10-31"))
    assert exc_info.value.field == "ID"


def test_get_waybill_units_parses_fixture():
    client, handler = make_client({"get_waybill_units": fixture_text("get_waybill_units_response.xml")})

    units = asyncio.run(client.get_waybill_units(CREDS))

    assert [unit.id for unit in units] == ["1", "2", "99"]
    assert all(unit.name for unit in units)
    assert "<su>svc-user</su>" in handler.body_of("get_waybill_units")

import re
from datetime import datetime, timezone

import pytest

from bar_api.app.domain import OrderLineRecord, OrderRecord, OrderSource, OrderStatus
from bar_api.app.printing import build_ticket
from bar_api.app.printing.ticket import (
    ALIGN_CENTER,
    BOLD_ON,
    FULL_CUT,
    INIT,
    paper_width,
)

_CONTROL_RE = re.compile(r"\x1b@|\x1b[Ea].|\x1dVA.", re.DOTALL)


def _order(**overrides) -> OrderRecord:
    fields = dict(
        id="o1",
        code="DRK-20260301-7K2Q",
        status=OrderStatus.PENDING,
        source=OrderSource.VERIFIED_TABLE,
        table_code="M07",
        subtotal=1293.3,
        created_at=datetime(2026, 3, 1, 23, 5, 9, tzinfo=timezone.utc),
        updated_at=datetime(2026, 3, 1, 23, 5, 9, tzinfo=timezone.utc),
        customer_name="José “Pepe” Pérez de la Santísima Trinidad",
        customer_phone="+5491122334455",
        note="Bring everything together please, we are celebrating a birthday tonight",
        lines=(
            OrderLineRecord(
                drink_id="mojito",
                drink_name="Mojito de maracuyá con hierbabuena fresca",
                qty=30,
                unit_price=42.9,
                line_total=1287.0,
                note="sin hielo – por favor",
            ),
            OrderLineRecord(
                drink_id="shot",
                drink_name="Shot ✓",
                qty=1,
                unit_price=6.3,
                line_total=6.3,
            ),
        ),
    )
    fields.update(overrides)
    return OrderRecord(**fields)


def _text_lines(data: bytes) -> list[str]:
    return _CONTROL_RE.sub("", data.decode("latin-1")).split("\n")


@pytest.mark.parametrize("paper", ["58mm", "80mm"])
def test_lines_fit_the_paper(paper):
    width = paper_width(paper)
    for line in _text_lines(build_ticket(_order(), paper=paper)):
        assert len(line) <= width, line


def test_byte_framing():
    data = build_ticket(_order())
    assert data.startswith((INIT + BOLD_ON + ALIGN_CENTER).encode("latin-1"))
    assert data.endswith(b"\n\n" + FULL_CUT.encode("latin-1"))
    assert data.endswith(b"\x1dVA\x10")


def test_ticket_content():
    lines = _text_lines(build_ticket(_order()))
    assert lines[0].strip() == "ORDER"
    assert lines[1].strip() == "DRK-20260301-7K2Q"
    assert lines[2] == "=" * 32
    assert lines[3] == "01/03/2026 23:05:09"
    assert lines[4] == "Table M07"
    text = "\n".join(lines)
    assert '"Pepe"' in text
    assert "30 x $ 42.90" + " " * 10 + "$ 1,287.00" in lines
    assert "$ 1,287.00" in text
    assert "  note: sin hielo - por favor" in text
    assert "Shot ?" in text
    assert "ITEMS" + " " * 25 + "31" in text
    assert any(line.startswith("TOTAL") and line.endswith("$ 1,293.30") for line in lines)


def test_counter_order_without_customer():
    order = _order(
        source=OrderSource.COUNTER,
        table_code=None,
        customer_name=None,
        customer_phone=None,
        note=None,
    )
    lines = _text_lines(build_ticket(order))
    assert lines[4] == "Counter"
    assert lines[5] == "Customer not provided"
    assert not any(line.startswith("Order note") for line in lines)


def test_timestamp_uses_ticket_timezone():
    lines = _text_lines(build_ticket(_order(), tz="America/Argentina/Buenos_Aires"))
    assert lines[3] == "01/03/2026 20:05:09"


def test_unknown_timezone_falls_back_to_utc():
    lines = _text_lines(build_ticket(_order(), tz="Mars/Olympus"))
    assert lines[3] == "01/03/2026 23:05:09"


def test_output_is_latin1():
    data = build_ticket(_order())
    assert "Jos\xe9".encode("latin-1") in data
    assert "maracuy\xe1".encode("latin-1") in data


def test_unknown_paper():
    with pytest.raises(KeyError):
        build_ticket(_order(), paper="110mm")

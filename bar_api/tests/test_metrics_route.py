import pytest

from bar_api.app.main import app
from bar_api.app.printing import PrintQueue
from bar_api.app.table_auth import sign_table_code


class IdlePrinter:
    async def send(self, data: bytes) -> None:
        return None


@pytest.mark.anyio
async def test_metrics_expose_counters(client):
    await client.get("/missing")
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    text = resp.text
    for name in (
        "http_requests_total",
        "http_errors_total",
        "orders_created_total",
        "code_conflicts_total",
        "table_signature_rejections_total",
        "print_jobs_total",
        "print_queue_depth",
    ):
        assert name in text
    assert 'status="404"' in text


@pytest.mark.anyio
async def test_request_path_label_uses_route_template(client, operator_headers):
    await client.get("/api/orders/some-order-id", headers=operator_headers)
    text = (await client.get("/metrics")).text
    assert 'path="/api/orders/{order_id}"' in text
    assert "some-order-id" not in text


@pytest.mark.anyio
async def test_error_counter_labels_route_template(client, operator_headers):
    sample = 'http_errors_total{path="/api/orders/{order_id}",status="404"}'
    before = _value((await client.get("/metrics")).text, sample, default=0.0)
    resp = await client.get("/api/orders/gone-order", headers=operator_headers)
    assert resp.status_code == 404
    await client.get("/api/orders", headers=operator_headers)
    text = (await client.get("/metrics")).text
    assert _value(text, sample) == before + 1
    assert "gone-order" not in text
    assert 'http_errors_total{path="/api/orders",status="200"}' not in text


@pytest.mark.anyio
async def test_order_metrics(client, settings_env):
    settings_env(table_qr_signing_secret="qr-secret")
    before = (await client.get("/metrics")).text
    await client.post(
        "/api/orders",
        json={
            "items": [{"drink_id": "mojito", "qty": 1}],
            "table_code": "M01",
            "table_token": sign_table_code("M01", "wrong-secret"),
        },
    )
    after = (await client.get("/metrics")).text
    assert _value(after, "table_signature_rejections_total") == (
        _value(before, "table_signature_rejections_total") + 1
    )
    assert _value(after, 'orders_created_total{source="counter"}') == (
        _value(before, 'orders_created_total{source="counter"}') + 1
    )


@pytest.mark.anyio
async def test_queue_depth_gauge(client):
    queue = PrintQueue(IdlePrinter())
    queue.submit("a", b"a")
    queue.submit("b", b"b")
    app.state.print_queue = queue
    text = (await client.get("/metrics")).text
    assert _value(text, "print_queue_depth") == 2.0


def _value(text: str, sample: str, default: float | None = None) -> float:
    for line in text.splitlines():
        if line.startswith(sample + " "):
            return float(line.rsplit(" ", 1)[1])
    if default is not None:
        return default
    raise AssertionError(f"{sample} not exposed")

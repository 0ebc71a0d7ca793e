import base64

from courserep.staff.services.qr_codes import (
    display_code,
    instance_id_from_code,
    render_qr_data_url,
)


def test_display_code_wraps_instance_id():
    assert display_code("ATT_INT-000007") == "ATT-ATT_INT-000007"


def test_code_maps_back_to_instance_id():
    assert instance_id_from_code("ATT-ATT_INT-000007") == "ATT_INT-000007"
    assert instance_id_from_code("ATT_INT-000007") == "ATT_INT-000007"


def test_render_produces_png_data_url():
    url = render_qr_data_url("ATT-ATT_INT-000001")

    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):])[:8] == b"\x89PNG\r\n\x1a\n"

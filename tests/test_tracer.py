from astrosolve.tracer import Tracer


def test_tracer_exports_copies():
    t = Tracer()
    detail = {"symbol": "a", "value": 1.0}
    t.add("value_parsed", detail)
    t.add("unit_fallback", {"from": "furlongs", "to": "meters", "value": 3.0})
    detail["value"] = 99.0
    assert len(t) == 2
    assert t.kinds() == ["value_parsed", "unit_fallback"]
    assert t.steps()[0] == {"kind": "value_parsed", "detail": {"symbol": "a", "value": 1.0}}
    assert t.of_kind("unit_fallback") == [{"from": "furlongs", "to": "meters", "value": 3.0}]
    assert t.of_kind("solved") == []

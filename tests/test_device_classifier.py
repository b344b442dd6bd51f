import pytest

from netwatch_manager.core.constants import DeviceType
from netwatch_manager.services.device_classifier import (
    TYPE_RULES,
    classify_device_type,
    display_name,
)


@pytest.mark.parametrize("name, expected", [
    ("Core Router", DeviceType.ROUTER),
    ("RB4011 Gateway", DeviceType.ROUTER),
    ("MikroTik hAP", DeviceType.ROUTER),
    ("SW-Floor2", DeviceType.SWITCH),
    ("Main Switch", DeviceType.SWITCH),
    ("ap-lobby", DeviceType.ACCESS_POINT),
    ("Office WiFi", DeviceType.ACCESS_POINT),
    ("PC-Reception", DeviceType.PC),
    ("Design Workstation", DeviceType.PC),
    ("Finance Laptop", DeviceType.LAPTOP),
    ("iPad Kitchen", DeviceType.TABLET),
    ("HP Printer", DeviceType.PRINTER),
    ("GTEX Scanner", DeviceType.SCANNER_GTEX),
    ("Lobby TV", DeviceType.SMART_TV),
    ("Camera Gate", DeviceType.CCTV),
    ("File Server", DeviceType.SERVER),
    ("Boss Phone", DeviceType.PHONE),
    ("Thermostat", DeviceType.OTHER),
    ("", DeviceType.OTHER),
    (None, DeviceType.OTHER),
])
def test_classify_device_type(name, expected):
    assert classify_device_type(name) is expected


def test_ambiguous_names_follow_rule_order():
    # "tv" is checked before "cctv", and access points before printers
    assert classify_device_type("CCTV Gate") is DeviceType.SMART_TV
    assert classify_device_type("ap-printer") is DeviceType.ACCESS_POINT
    assert classify_device_type("srv-tv") is DeviceType.SMART_TV


def test_classification_is_case_insensitive():
    assert classify_device_type("CORE ROUTER") is classify_device_type("core router")


def test_rule_table_covers_every_type_but_fallback():
    assert {device_type for _, device_type in TYPE_RULES} == set(DeviceType) - {DeviceType.OTHER}


def test_display_name():
    assert display_name("Lobby AP", "10.0.0.2") == "Lobby AP"
    assert display_name("", "10.0.0.2") == "10.0.0.2"
    assert display_name(None, None) == "Unknown Device"

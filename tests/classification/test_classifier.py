"""
Tests for the alert classifier.

============================================================
PURPOSE
============================================================
TEST PRINCIPLES:
- Every subject yields a full incident or nothing
- Unmatched names round-trip as needs_review with the raw key
- Malformed and unrecognized mail never aborts a batch

============================================================
"""

import base64
from datetime import datetime, timezone

import pytest
from zoneinfo import ZoneInfo

from canonicalization import DictionaryRegistry
from classification import (
    AlertClassifier,
    AlertFamily,
    AlertState,
    CircuitIncident,
    ClassifierConfig,
    PingDownIncident,
    RawAlert,
)


KYIV = ZoneInfo("Europe/Kyiv")


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def registry():
    return DictionaryRegistry.from_lines(
        pd_lines=["sw1=Site A", "core\\d+=Core"],
        sdh_lines=["siteA=Site A", "siteB=Site B"],
    )


@pytest.fixture
def classifier(registry):
    return AlertClassifier(registry, tz=KYIV)


@pytest.fixture
def received():
    return datetime(2026, 10, 19, 10, 15, 0, tzinfo=KYIV)


def make_alert(subject, received, body=""):
    return RawAlert(subject=subject, body=body, received_at=received)


# ============================================================
# FAMILY DISPATCH
# ============================================================

class TestFamilyDispatch:

    def test_ping_down_signature(self, classifier):
        assert classifier.family_of("Zabbix Problem: sw1-3: Unavailable by ICMP ping") == AlertFamily.PD

    def test_restart_signature(self, classifier):
        assert classifier.family_of("Zabbix Problem: sw1: sw1 has been restarted") == AlertFamily.PD

    def test_circuit_signature(self, classifier):
        assert classifier.family_of("OSM Problem: Alarm a__b LOS STM STM-4") == AlertFamily.SDH

    def test_power_signature(self, classifier):
        assert classifier.family_of("OSM Problem: Alarm odesa Mains Power failure") == AlertFamily.SDH

    def test_ping_down_takes_precedence(self, classifier):
        subject = "Zabbix Problem: pwr-1: Unavailable by ICMP ping POWER"
        assert classifier.family_of(subject) == AlertFamily.PD

    def test_stm1_only_in_debug(self, registry):
        subject = "OSM Problem: Alarm a__b LOS STM STM-1"
        assert AlertClassifier(registry).family_of(subject) is None
        assert AlertClassifier(registry, debug=True).family_of(subject) == AlertFamily.SDH

    def test_unrecognized_subject_is_dropped(self, classifier, received):
        incident = classifier.classify(make_alert("Weekly newsletter", received))
        assert incident is None
        assert classifier.stats.unrecognized == 1


# ============================================================
# PING-DOWN
# ============================================================

class TestPingDown:

    def test_device_token_scenario(self, classifier, received):
        alert = make_alert("Zabbix Problem: sw1-3: Unavailable by ICMP ping", received)

        incident = classifier.classify(alert)

        assert isinstance(incident, PingDownIncident)
        assert incident.group_key == "Site A"
        assert incident.device_key == "sw1-3"
        assert incident.needs_review is False
        assert incident.state == AlertState.PROBLEM
        assert incident.primary_timestamp == received
        assert incident.secondary_timestamp == received

    def test_message_text(self, classifier, received):
        alert = make_alert("Zabbix Problem: sw1-3: Unavailable by ICMP ping", received)

        incident = classifier.classify(alert)

        assert incident.message == (
            "19 жовт 2026 10:15:00 : Zabbix зареєстровано початок інциденту, "
            "зникнення зв'язку з обладнанням на Site A"
        )

    def test_default_interface_suffix_removed_from_device(self, classifier, received):
        alert = make_alert("Zabbix Problem: sw1: Unavailable by ICMP ping", received)
        incident = classifier.classify(alert)
        assert incident.device_key == "sw1"
        assert incident.group_key == "Site A"

    def test_role_prefix_stripped_for_lookup(self, classifier, received):
        alert = make_alert("Zabbix Problem: r-core7-2: Unavailable by ICMP ping", received)
        incident = classifier.classify(alert)
        assert incident.group_key == "Core"
        assert incident.device_key == "r-core7-2"

    def test_unmatched_device_needs_review(self, classifier, received):
        alert = make_alert("Zabbix Problem: zz9-1: Unavailable by ICMP ping", received)

        incident = classifier.classify(alert)

        assert incident.needs_review is True
        assert incident.group_key == "zz9"
        assert "потребує коригування назви" in incident.message
        assert "'<b>zz9</b>'" in incident.message
        assert classifier.stats.needs_review == 1

    def test_resolved_state(self, classifier, received):
        alert = make_alert("Zabbix Resolved: sw1-3: Unavailable by ICMP ping", received)
        incident = classifier.classify(alert)
        assert incident.state == AlertState.RESOLVED
        assert "кінець інциденту" in incident.message

    def test_restart_problem_is_kept(self, classifier, received):
        alert = make_alert("Zabbix Problem: sw1-3: sw1 has been restarted", received)
        incident = classifier.classify(alert)
        assert "перезавантаження обладнання" in incident.message

    def test_resolved_restart_is_dropped(self, classifier, received):
        alert = make_alert("Zabbix Resolved: sw1-3: sw1 has been restarted", received)
        assert classifier.classify(alert) is None
        assert classifier.stats.filtered == 1

    @pytest.mark.parametrize("subject", [
        "Zabbix Problem: IVR-1: Unavailable by ICMP ping",
        "Zabbix Problem: ramb-12: Unavailable by ICMP ping",
        "Zabbix Problem: console-1: Unavailable by ICMP ping",
    ])
    def test_denylisted_subjects_are_dropped(self, classifier, received, subject):
        assert classifier.classify(make_alert(subject, received)) is None

    def test_exemption_marker_overrides_denylist(self, classifier, received):
        alert = make_alert("Zabbix Problem: alca-console-1: Unavailable by ICMP ping", received)
        assert classifier.classify(alert) is not None

    def test_short_subject_is_malformed(self, classifier, received):
        alert = make_alert("Unavailable by ICMP ping", received)
        assert classifier.classify(alert) is None
        assert classifier.stats.malformed == 1

    def test_device_name_is_escaped(self, received):
        registry = DictionaryRegistry.from_lines(pd_lines=["sw1=A & B <core>"])
        classifier = AlertClassifier(registry, tz=KYIV)
        alert = make_alert("Zabbix Problem: sw1-3: Unavailable by ICMP ping", received)

        incident = classifier.classify(alert)

        assert "A &amp; B &lt;core&gt;" in incident.message
        assert incident.group_key == "A & B <core>"


# ============================================================
# CIRCUIT / POWER
# ============================================================

class TestCircuit:

    def test_pair_scenario(self, classifier, received):
        alert = make_alert("OSM Problem: Alarm siteA__siteB LOS STM STM-4", received)

        incident = classifier.classify(alert)

        assert isinstance(incident, CircuitIncident)
        assert incident.group_key == "Site A"
        assert incident.device_key == "Site B"
        assert incident.is_pair
        assert "з Site A на Site B" in incident.message
        assert incident.message.startswith("19 жовт 2026 10:15:00 : OSM зареєстровано початок інциденту, ")

    def test_single_site_circuit(self, classifier, received):
        alert = make_alert("OSM Problem: Alarm siteA LOS STM STM-4", received)
        incident = classifier.classify(alert)
        assert incident.device_key == ""
        assert "втрата зв'язності на Site A" in incident.message

    def test_power_alarm(self, classifier, received):
        alert = make_alert("OSM Resolved: Alarm siteA Mains Power failure", received)

        incident = classifier.classify(alert)

        assert incident.state == AlertState.RESOLVED
        assert "OSM зареєстровано кінець інциденту, зникнення живлення на виносі Site A" in incident.message

    def test_power_geo_is_not_split(self, classifier, received):
        alert = make_alert("OSM Problem: Alarm siteA__siteB Mains Power failure", received)
        incident = classifier.classify(alert)
        assert incident.group_key == "siteA__siteB"
        assert incident.needs_review is True

    def test_appendix(self, classifier, received):
        alert = make_alert("OSM Problem: Alarm siteA Mains Power Air Conditioning", received)
        incident = classifier.classify(alert)
        assert incident.message.endswith(" (кондиціонер)")

    def test_unmatched_sites_listed_for_review(self, classifier, received):
        alert = make_alert("OSM Problem: Alarm xx__yy LOS STM STM-4", received)

        incident = classifier.classify(alert)

        assert incident.group_needs_review
        assert incident.device_needs_review
        assert "'<b>xx</b>' та '<b>yy</b>'" in incident.message

    def test_only_unmatched_side_listed(self, classifier, received):
        alert = make_alert("OSM Problem: Alarm siteA__yy LOS STM STM-4", received)
        incident = classifier.classify(alert)
        assert incident.group_needs_review is False
        assert incident.device_needs_review is True
        assert "'<b>yy</b>')" in incident.message
        assert "'<b>Site A</b>'" not in incident.message

    def test_trap_value_sets_secondary_timestamp(self, classifier, received):
        body = "Alarm raised\nTrap value: LOS 2026-10-19T09:58:12 severity major\n"
        alert = make_alert("OSM Problem: Alarm siteA__siteB LOS STM STM-4", received, body)

        incident = classifier.classify(alert)

        assert incident.primary_timestamp == received
        assert incident.secondary_timestamp == datetime(2026, 10, 19, 9, 58, 12, tzinfo=KYIV)
        assert incident.message.startswith("19 жовт 2026 09:58:12 : ")

    def test_trap_value_in_base64_body(self, classifier, received):
        text = "Trap value: 2026-10-19T07:00:00\n"
        body = base64.b64encode(text.encode("utf-8")).decode("ascii")
        alert = make_alert("OSM Problem: Alarm siteA__siteB LOS STM STM-4", received, body)

        incident = classifier.classify(alert)

        assert incident.secondary_timestamp.hour == 7

    def test_without_trap_value_secondary_is_receipt(self, classifier, received):
        alert = make_alert("OSM Problem: Alarm siteA Mains Power failure", received, "no trap here")
        incident = classifier.classify(alert)
        assert incident.secondary_timestamp == received

    def test_missing_geo_token_is_malformed(self, classifier, received):
        alert = make_alert("OSM Power", received)
        assert classifier.classify(alert) is None
        assert classifier.stats.malformed == 1


# ============================================================
# BATCH
# ============================================================

class TestBatch:

    def test_classify_all_keeps_order_and_skips_bad(self, classifier, received):
        alerts = [
            make_alert("Zabbix Problem: sw1-3: Unavailable by ICMP ping", received),
            make_alert("Unavailable by ICMP ping", received),
            make_alert("hello", received),
            make_alert("OSM Problem: Alarm siteA Mains Power failure", received),
        ]

        incidents = classifier.classify_all(alerts)

        assert [i.category for i in incidents] == [AlertFamily.PD, AlertFamily.SDH]
        assert classifier.stats.to_dict() == {
            "seen": 4,
            "classified": 2,
            "unrecognized": 1,
            "filtered": 0,
            "malformed": 1,
            "needs_review": 0,
        }

    def test_receipt_time_converted_to_local(self, classifier):
        alert = make_alert(
            "Zabbix Problem: sw1-3: Unavailable by ICMP ping",
            datetime(2026, 1, 5, 7, 0, 0, tzinfo=timezone.utc),
        )
        incident = classifier.classify(alert)
        assert incident.message.startswith("05 січ 2026 09:00:00 : ")

    def test_stats_belong_to_one_classifier(self, registry, received):
        first = AlertClassifier(registry, tz=KYIV)
        second = AlertClassifier(registry, tz=KYIV)

        first.classify(make_alert("Zabbix Problem: sw1-3: Unavailable by ICMP ping", received))

        assert first.stats.seen == 1
        assert second.stats.seen == 0

    def test_naive_receipt_time_is_report_local(self, classifier):
        alert = make_alert(
            "Zabbix Problem: sw1-3: Unavailable by ICMP ping",
            datetime(2026, 10, 19, 10, 0, 0),
        )
        incident = classifier.classify(alert)

        assert incident.primary_timestamp.tzinfo is not None
        assert incident.primary_timestamp == datetime(2026, 10, 19, 10, 0, 0, tzinfo=KYIV)
        assert incident.secondary_timestamp == incident.primary_timestamp
        assert incident.message.startswith("19 жовт 2026 10:00:00 : ")

    def test_naive_circuit_receipt_time_is_report_local(self, classifier):
        alert = make_alert(
            "OSM Problem: Alarm siteA__siteB LOS STM STM-4",
            datetime(2026, 10, 19, 10, 0, 0),
        )
        incident = classifier.classify(alert)

        assert incident.primary_timestamp == datetime(2026, 10, 19, 10, 0, 0, tzinfo=KYIV)
        assert incident.secondary_timestamp.tzinfo is not None


# ============================================================
# CONFIG
# ============================================================

class TestClassifierConfig:

    def test_unknown_keys_ignored(self):
        config = ClassifierConfig.from_dict({"bogus": 1, "pair_delimiter": "--"})
        assert config.pair_delimiter == "--"

    def test_empty_delimiter_rejected(self):
        with pytest.raises(ValueError):
            ClassifierConfig.from_dict({"pair_delimiter": ""})

    def test_custom_denylist(self, registry, received):
        config = ClassifierConfig(pd_denylist=["lab-"])
        classifier = AlertClassifier(registry, config=config, tz=KYIV)

        assert classifier.classify(make_alert("Zabbix Problem: lab-1: Unavailable by ICMP ping", received)) is None
        assert classifier.classify(make_alert("Zabbix Problem: IVR-1: Unavailable by ICMP ping", received)) is not None

    def test_empty_denylist_disables_filter(self, registry, received):
        config = ClassifierConfig(pd_denylist=[])
        classifier = AlertClassifier(registry, config=config, tz=KYIV)
        assert classifier.classify(make_alert("Zabbix Problem: IVR-1: Unavailable by ICMP ping", received)) is not None

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "classifier.yaml"
        path.write_text("classifier:\n  default_interface_suffix: '0'\n", encoding="utf-8")
        assert ClassifierConfig.from_yaml(path).default_interface_suffix == "0"

"""
Tests for configuration, the report pipeline and the CLI.

============================================================
PURPOSE
============================================================
TEST PRINCIPLES:
- Runs are replayable with a mock clock and an in-memory source
- Configuration precedence: YAML, then environment, then CLI
- Failures map to exit codes

============================================================
"""

import io
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from zoneinfo import ZoneInfo

from canonicalization import DictionaryRegistry
from classification import AlertClassifier, RawAlert
from core.clock import DutySchedule, MockClock
from core.exceptions import ConfigurationError, DictionaryLoadError, MailboxError
from data_ingestion import RamosSensor, RamosSiteReading, SnmpWalkProbe, StaticAlertSource, TemperatureReading
from data_ingestion.collectors import RamosProbe, TemperatureProbe
from notifications import ConsoleTransport
from orchestrator import (
    ReportConfig,
    ReportOrchestrator,
    ReportPipeline,
    build_config,
    create_parser,
    load_config,
    main,
)
from orchestrator.cli import EXIT_FATAL, EXIT_MAILBOX, EXIT_OK, run
from reporting import NO_INCIDENTS


KYIV = ZoneInfo("Europe/Kyiv")

CONFIG_YAML = """
incidents: true
temperature: false
mail:
  hostname: imap.example.net
  username: alerts
  password: secret
  ssl: true
email:
  from: noc-report@example.net
  reply_to: noc@example.net
  to: [duty@example.net]
  to_debug: admin@example.net
snmp:
  community: public
  hosts_suffix: mgmt.example.net
  hosts:
    "ups1 server room":
      desc: .1.3.6.1.2.1.1.5.0
      temp: .1.3.6.1.4.1.318.1.1.1.2.2.2.0
duty:
  timezone: Europe/Kyiv
classifier:
  pair_delimiter: "__"
"""


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "noc_report.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


@pytest.fixture
def dictionary_files(tmp_path):
    pd = tmp_path / "pd.txt"
    pd.write_text("sw1=Site A\n", encoding="utf-8")
    sdh = tmp_path / "sdh.txt"
    sdh.write_text("siteA=Site A\nsiteB=Site B\n", encoding="utf-8")
    return pd, sdh


@pytest.fixture
def morning():
    return datetime(2026, 10, 19, 8, 30, 0, tzinfo=KYIV)


@pytest.fixture
def alerts():
    return [
        RawAlert(
            "Zabbix Problem: sw1-3: Unavailable by ICMP ping", "",
            datetime(2026, 10, 19, 2, 0, 0, tzinfo=KYIV),
        ),
        RawAlert(
            "OSM Problem: Alarm siteA__siteB LOS STM STM-4", "",
            datetime(2026, 10, 19, 3, 0, 0, tzinfo=KYIV),
        ),
        RawAlert(
            "OSM Problem: Alarm siteA__siteB LOS STM STM-4", "",
            datetime(2026, 10, 19, 3, 0, 0, tzinfo=KYIV),
        ),
        RawAlert(
            "Zabbix Problem: zz9-1: Unavailable by ICMP ping", "",
            datetime(2026, 10, 19, 8, 10, 0, tzinfo=KYIV),
        ),
        RawAlert("Unrelated mail", "", datetime(2026, 10, 19, 4, 0, 0, tzinfo=KYIV)),
    ]


@pytest.fixture
def classifier():
    registry = DictionaryRegistry.from_lines(
        pd_lines=["sw1=Site A"],
        sdh_lines=["siteA=Site A", "siteB=Site B"],
    )
    return AlertClassifier(registry, tz=KYIV)


class FixedProbe(TemperatureProbe):

    def read(self):
        return [TemperatureReading(host="ups1", address="ups1.mgmt", description="Room", celsius="22")]


class FixedRamosProbe(RamosProbe):

    def read(self):
        sensor = RamosSensor(
            description="Hot zone", unit="C", value="24",
            low_warning="10", high_warning="30", low_critical="5", high_critical="40",
        )
        return [RamosSiteReading(address="10.10.0.21", name="Kyiv DC", sensors=(sensor,))]


RAMOS_SITE = {
    "name": "Kyiv DC",
    "index": ".1.1",
    "description": ".1.2",
    "unit": ".1.4",
    "value": ".1.3",
    "low_warning": ".1.5",
    "high_warning": ".1.6",
    "low_critical": ".1.7",
    "high_critical": ".1.8",
}


# ============================================================
# CONFIGURATION
# ============================================================

class TestConfiguration:

    def test_load_yaml(self, config_file):
        config = load_config(config_file, environ={})

        assert config.mailbox.hostname == "imap.example.net"
        assert config.mailbox.port == 993
        assert config.email.recipients == ["duty@example.net"]
        assert config.temperature_enabled is False
        assert config.telemetry.targets[0].host == "ups1"
        assert config.validate() == []

    def test_environment_overrides_yaml(self, config_file):
        config = load_config(config_file, environ={
            "NOCREPORT_MAIL_HOSTNAME": "imap.internal",
            "NOCREPORT_MAIL_SSL": "false",
            "NOCREPORT_EMAIL_TO": "a@example.net, b@example.net",
            "NOCREPORT_DEBUG": "1",
        })

        assert config.mailbox.hostname == "imap.internal"
        assert config.mailbox.port == 143
        assert config.email.recipients == ["a@example.net", "b@example.net"]
        assert config.debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "absent.yaml", environ={})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("mail: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path, environ={})

    def test_invalid_classifier_pattern(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("classifier:\n  pd_signature: '(['\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path, environ={})

    def test_validation_errors(self):
        config = ReportConfig.from_dict({"debug": True})
        errors = config.validate()
        assert "email.from, email.reply_to and email.to are required" in errors
        assert "email.to_debug is required in debug mode" in errors
        assert "mail.hostname is required when incidents are enabled" in errors

    def test_unknown_timezone(self):
        config = ReportConfig.from_dict({"duty": {"timezone": "Mars/Olympus"}})
        with pytest.raises(ConfigurationError):
            config.duty.tz()

    def test_cli_flags_override(self, config_file, dictionary_files):
        pd, sdh = dictionary_files
        args = create_parser().parse_args([
            "--config", str(config_file),
            "--no-incidents",
            "--temperature",
            "--dictionary-pd", str(pd),
            "--dictionary-sdh", str(sdh),
        ])

        config = build_config(args, environ={})

        assert config.incidents_enabled is False
        assert config.temperature_enabled is True
        assert config.dictionary_pd_path == Path(pd)
        assert config.dictionary_sdh_path == Path(sdh)

    def test_flags_left_unset_keep_file_values(self, config_file):
        args = create_parser().parse_args(["--config", str(config_file)])
        config = build_config(args, environ={})
        assert config.incidents_enabled is True
        assert config.temperature_enabled is False
        assert config.ramos_enabled is False


class TestRamosConfiguration:

    def test_ramos_off_by_default(self):
        config = ReportConfig.from_dict({})
        assert config.ramos_enabled is False
        assert config.ramos.sites == ()

    def test_sites_and_per_probe_communities(self):
        config = ReportConfig.from_dict({
            "ramos": True,
            "snmp": {
                "community": {"celsius": "temp-ro", "ramos": "ramos-ro"},
                "ramos": {"10.10.0.21": RAMOS_SITE},
            },
        })

        assert config.ramos_enabled is True
        assert config.telemetry.community == "temp-ro"
        assert config.ramos.community == "ramos-ro"
        site = config.ramos.sites[0]
        assert site.address == "10.10.0.21"
        assert site.name == "Kyiv DC"
        assert site.index_oid == ".1.1"
        assert site.sensor_oids("7") == (".1.2.7", ".1.4.7", ".1.3.7", ".1.5.7", ".1.6.7", ".1.7.7", ".1.8.7")

    def test_single_community_applies_to_both_probes(self):
        config = ReportConfig.from_dict({"snmp": {"community": "shared"}})
        assert config.telemetry.community == "shared"
        assert config.ramos.community == "shared"

    def test_site_missing_column_raises(self):
        site = dict(RAMOS_SITE)
        del site["high_critical"]
        with pytest.raises(ConfigurationError) as exc_info:
            ReportConfig.from_dict({"snmp": {"ramos": {"10.10.0.21": site}}})
        assert "high_critical" in exc_info.value.message

    def test_environment_communities(self, config_file):
        config = load_config(config_file, environ={
            "NOCREPORT_SNMP_COMMUNITY": "shared",
            "NOCREPORT_SNMP_COMMUNITY_RAMOS": "ramos-ro",
        })
        assert config.telemetry.community == "shared"
        assert config.ramos.community == "ramos-ro"

    def test_cli_ramos_flag(self, config_file):
        args = create_parser().parse_args(["--config", str(config_file), "--ramos"])
        assert build_config(args, environ={}).ramos_enabled is True

        args = create_parser().parse_args(["--config", str(config_file), "--no-ramos"])
        assert build_config(args, environ={}).ramos_enabled is False

    def test_ramos_alone_counts_as_enabled_section(self):
        config = ReportConfig.from_dict({"incidents": False, "temperature": False})
        assert not config.any_section_enabled
        config.ramos_enabled = True
        assert config.any_section_enabled

    def test_empty_ramos_community_is_invalid(self):
        config = ReportConfig.from_dict({"ramos": True, "snmp": {"community": {"ramos": ""}}})
        assert "snmp.community is required when ramos is enabled" in config.validate()


# ============================================================
# PIPELINE
# ============================================================

class TestReportPipeline:

    def test_full_run(self, classifier, alerts, morning):
        pipeline = ReportPipeline(
            schedule=DutySchedule(tz=KYIV),
            clock=MockClock(morning),
            classifier=classifier,
            source=StaticAlertSource(alerts),
        )

        result = pipeline.run()

        assert result.subject == (
            "Автоматизований звіт за період з 2026-10-18 20:00:00 по 2026-10-19 07:59:59"
        )
        assert result.alerts_fetched == 5
        assert result.incidents_stored == 4
        assert result.discarded == 1
        assert result.needs_review == 1
        assert result.sections == ["incidents"]

        html = result.html
        assert html.count("з Site A на Site B") == 2
        assert "[sw1-3]" in html
        # received after the night shift ended
        assert "zz9" not in html
        assert html.startswith("<html>")

    def test_empty_window(self, classifier, morning):
        pipeline = ReportPipeline(
            schedule=DutySchedule(tz=KYIV),
            clock=MockClock(morning),
            classifier=classifier,
            source=StaticAlertSource([]),
        )

        result = pipeline.run()

        assert NO_INCIDENTS in result.html
        assert result.incidents_stored == 0

    def test_temperature_only(self, morning):
        pipeline = ReportPipeline(
            schedule=DutySchedule(tz=KYIV),
            clock=MockClock(morning),
            probe=FixedProbe(),
        )

        result = pipeline.run()

        assert result.sections == ["temperature"]
        assert "<b>22</b>°C" in result.html
        assert "Інциденти" not in result.html

    def test_ramos_section_follows_temperature(self, morning):
        pipeline = ReportPipeline(
            schedule=DutySchedule(tz=KYIV),
            clock=MockClock(morning),
            probe=FixedProbe(),
            ramos_probe=FixedRamosProbe(),
        )

        result = pipeline.run()

        assert result.sections == ["temperature", "ramos"]
        html = result.html
        assert html.index("Температура обладнання") < html.index("Температурні показники Ramos")
        assert "Майданчик Kyiv DC" in html
        assert '<font color="darkgrey">24</font></b>°C' in html

    def test_classifier_requires_source(self, classifier, morning):
        with pytest.raises(ValueError):
            ReportPipeline(DutySchedule(tz=KYIV), MockClock(morning), classifier=classifier)

    def test_deliver(self, classifier, morning):
        pipeline = ReportPipeline(
            schedule=DutySchedule(tz=KYIV),
            clock=MockClock(morning),
            classifier=classifier,
            source=StaticAlertSource([]),
        )
        transport = MagicMock()
        result = pipeline.run()

        pipeline.deliver(result, transport)

        transport.send.assert_called_once_with(result.subject, result.html)


# ============================================================
# ORCHESTRATOR
# ============================================================

class TestReportOrchestrator:

    def test_run_with_injected_collaborators(self, config_file, dictionary_files, alerts, morning):
        config = load_config(config_file, environ={})
        config.dictionary_pd_path, config.dictionary_sdh_path = dictionary_files
        stream = io.StringIO()

        orchestrator = ReportOrchestrator(
            config,
            clock=MockClock(morning),
            source=StaticAlertSource(alerts),
            transport=ConsoleTransport(stream),
        )
        result = orchestrator.run()

        assert stream.getvalue().startswith(f"Subject: {result.subject}")
        assert "з Site A на Site B" in stream.getvalue()

    def test_ramos_only_run(self, config_file, morning):
        config = load_config(config_file, environ={})
        config.incidents_enabled = False
        config.ramos_enabled = True
        stream = io.StringIO()

        result = ReportOrchestrator(
            config,
            clock=MockClock(morning),
            transport=ConsoleTransport(stream),
            ramos_probe=FixedRamosProbe(),
        ).run()

        assert result.sections == ["ramos"]
        assert "Майданчик Kyiv DC" in stream.getvalue()

    def test_ramos_enabled_uses_snmp_walk_probe(self, config_file, morning):
        config = load_config(config_file, environ={})
        config.incidents_enabled = False
        config.ramos_enabled = True

        with patch("orchestrator.core.SnmpWalkProbe", wraps=SnmpWalkProbe) as probe_class:
            ReportOrchestrator(config, clock=MockClock(morning)).build_pipeline()

        probe_class.assert_called_once_with(config.ramos)

    def test_missing_dictionary_is_fatal(self, config_file, tmp_path, morning):
        config = load_config(config_file, environ={})
        config.dictionary_pd_path = tmp_path / "absent.txt"

        orchestrator = ReportOrchestrator(
            config,
            clock=MockClock(morning),
            source=StaticAlertSource([]),
            transport=MagicMock(),
        )

        with pytest.raises(DictionaryLoadError):
            orchestrator.run()


# ============================================================
# CLI
# ============================================================

class TestCli:

    def test_all_sections_disabled_is_noop(self, config_file):
        config = load_config(config_file, environ={})
        config.incidents_enabled = False
        config.temperature_enabled = False

        with patch("orchestrator.cli.ReportOrchestrator") as orchestrator:
            assert run(config) == EXIT_OK
        orchestrator.assert_not_called()

    def test_ramos_alone_runs_report(self, config_file):
        config = load_config(config_file, environ={})
        config.incidents_enabled = False
        config.temperature_enabled = False
        config.ramos_enabled = True

        with patch("orchestrator.cli.ReportOrchestrator") as orchestrator:
            orchestrator.return_value.run.return_value.duration_seconds = 0.1
            assert run(config) == EXIT_OK
        orchestrator.assert_called_once()

    def test_mailbox_failure_exit_code(self, config_file):
        config = load_config(config_file, environ={})
        with patch("orchestrator.cli.ReportOrchestrator") as orchestrator:
            orchestrator.return_value.run.side_effect = MailboxError("IMAP error: refused")
            assert run(config) == EXIT_MAILBOX

    def test_fatal_error_exit_code(self, config_file):
        config = load_config(config_file, environ={})
        with patch("orchestrator.cli.ReportOrchestrator") as orchestrator:
            orchestrator.return_value.run.side_effect = DictionaryLoadError("x.txt")
            assert run(config) == EXIT_FATAL

    def test_dry_run_uses_console(self, config_file):
        config = load_config(config_file, environ={})
        with patch("orchestrator.cli.ReportOrchestrator") as orchestrator:
            orchestrator.return_value.run.return_value.duration_seconds = 0.1
            run(config, dry_run=True)
        _, kwargs = orchestrator.call_args
        assert isinstance(kwargs["transport"], ConsoleTransport)

    def test_main_missing_config_file(self, tmp_path):
        assert main(["--config", str(tmp_path / "absent.yaml")]) == EXIT_FATAL

    def test_main_invalid_config(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("incidents: true\n", encoding="utf-8")
        with patch("orchestrator.cli.load_config", return_value=ReportConfig()), \
                patch("orchestrator.cli.setup_logging"):
            assert main(["--config", str(path), "--log-format", "text"]) == EXIT_FATAL

    def test_main_runs_report(self, config_file):
        with patch("orchestrator.cli.run", return_value=EXIT_OK) as run_mock, \
                patch("orchestrator.cli.setup_logging"), \
                patch("orchestrator.cli.load_config", side_effect=lambda path, environ=None: load_config(path, environ={})):
            assert main(["--config", str(config_file), "--dry-run"]) == EXIT_OK
        config = run_mock.call_args[0][0]
        assert config.mailbox.hostname == "imap.example.net"
        assert run_mock.call_args[1] == {"dry_run": True}

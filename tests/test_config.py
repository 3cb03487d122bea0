from pitwall.core.config import DEFAULT_TRIAGE_CONFIG, TriageConfig, load_triage_config


def test_defaults():
    cfg = DEFAULT_TRIAGE_CONFIG
    assert cfg.blocked_status_name == "Waiting for support"
    assert (cfg.stale_medium_hours, cfg.stale_high_hours) == (24.0, 72.0)
    assert (cfg.sla_medium_hours, cfg.sla_high_hours) == (8.0, 2.0)
    assert cfg.mark_request_update == "[PITWALL] Request update"
    assert cfg.mark_playbook_note == "[PITWALL] Playbook note"
    assert cfg.mark_escalation == "[PITWALL] Escalation"


def test_load_from_yaml(tmp_path):
    (tmp_path / "pitwall.yaml").write_text(
        "triage:\n"
        "  stale_high_hours: 48\n"
        "  audit_mark: '[OPS]'\n"
        "  search_limit: '25'\n"
        "  not_a_setting: true\n"
    )
    cfg = load_triage_config(tmp_path)
    assert cfg.stale_high_hours == 48.0
    assert cfg.search_limit == 25
    assert cfg.mark_request_update == "[OPS] Request update"
    assert cfg.sla_high_hours == 2.0


def test_missing_file_falls_back(tmp_path):
    assert load_triage_config(tmp_path) is DEFAULT_TRIAGE_CONFIG


def test_malformed_yaml_falls_back(tmp_path):
    (tmp_path / "pitwall.yaml").write_text("triage: [unclosed\n")
    assert load_triage_config(tmp_path) == DEFAULT_TRIAGE_CONFIG


def test_non_mapping_section_falls_back(tmp_path):
    (tmp_path / "pitwall.yaml").write_text("triage:\n  - stale_high_hours\n")
    assert load_triage_config(tmp_path) == DEFAULT_TRIAGE_CONFIG


def test_with_overrides_ignores_none_and_unknown():
    cfg = TriageConfig().with_overrides({"escalation_label": "hot", "stale_medium_hours": None, "x": 1})
    assert cfg.escalation_label == "hot"
    assert cfg.stale_medium_hours == 24.0

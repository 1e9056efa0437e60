# ==============================
# Config Precedence Tests
# ==============================
from __future__ import annotations

import textwrap

import pytest

from agentrun.config.loader import load_settings


def _write_yaml(path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body), encoding="utf-8")


def test_defaults_without_any_files(tmp_path) -> None:
    settings = load_settings(repo_root=str(tmp_path), env={})
    assert settings.progress.default_total_steps == 4
    assert settings.progress.clamp_progress is False
    assert settings.progress.completion_sentinels == ["final_completion", "enhanced_completion"]
    assert settings.logging.level == "INFO"


def test_config_precedence(tmp_path) -> None:
    root = tmp_path / "repo"
    _write_yaml(root / "configs" / "progress.yaml", """\
    progress:
      default_total_steps: 6
      check_cycles: true
    """)
    _write_yaml(root / "configs" / "logging.yaml", """\
    level: WARNING
    """)
    (root / ".env").write_text(
        "# local overrides\nAGENTRUN__PROGRESS__DEFAULT_TOTAL_STEPS=8\nAGENTRUN__LOGGING__LEVEL='ERROR'\n",
        encoding="utf-8",
    )

    env = {
        "AGENTRUN__LOGGING__LEVEL": "DEBUG",
        "AGENTRUN__PROGRESS__COMPLETION_SENTINELS": "final_completion,all_done",
        "UNRELATED": "x",
    }
    settings = load_settings(repo_root=str(root), env=env)

    assert settings.progress.check_cycles is True
    assert settings.progress.default_total_steps == 8
    assert settings.logging.level == "DEBUG"
    assert settings.progress.completion_sentinels == ["final_completion", "all_done"]


def test_invalid_config_raises_early(tmp_path) -> None:
    _write_yaml(tmp_path / "bad_configs" / "progress.yaml", """\
    progress:
      default_total_steps: 0
    """)
    with pytest.raises(ValueError) as excinfo:
        load_settings(repo_root=str(tmp_path), configs_dir="bad_configs", env={})
    assert "Invalid configuration" in str(excinfo.value)

    with pytest.raises(ValueError):
        load_settings(repo_root=str(tmp_path), env={"AGENTRUN__PROGRESS__UNKNOWN_KEY": "1"})

"""Configuration for a test run."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional


@dataclass
class RunConfig:
    """Settings the host passes when it triggers a run.

    Controls when the runner fires on bar updates, which suites are
    selected, and how results are reported.
    """

    # Trigger policy - when the host's bar clock fires a run
    start_test_at_bar: int = 50          # First bar at which tests may run
    run_tests_once: bool = True          # False re-runs on every bar after the start bar

    # Selection filters - empty string disables a filter
    namespace_filter: str = ""           # Registering module must start with this
    name_filter: str = ""                # Suite class name must contain this
    tag_filter: str = ""                 # Suite must carry at least one of these tags
    category_filter: str = ""            # Suite category must equal this (case-insensitive)

    # Reporting
    enable_logging: bool = True          # Push report lines to the live sink
    show_results_on_chart: bool = True   # Ask the host to annotate the run bar
    enable_timestamps: bool = False      # Prefix report lines with wall-clock time
    detailed_report: bool = True         # Timing statistics in the summary

    # Classification
    distinguish_errors: bool = False     # Unexpected faults become Errored instead of Failed

    def validate(self) -> None:
        """Validate configuration invariants."""
        assert self.start_test_at_bar >= 0, "Start bar cannot be negative"
        for name in ("namespace_filter", "name_filter", "tag_filter", "category_filter"):
            assert isinstance(getattr(self, name), str), f"{name} must be a string"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RunConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown run configuration keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_file(cls, file_path: str, overrides: Optional[dict] = None) -> "RunConfig":
        """
        Load configuration from JSON.

        Structure:
        {
            "run_config": {...}
        }
        A flat object of RunConfig fields is accepted too.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Run configuration file not found: {file_path}")

        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)

        config_data = data.get("run_config", data)
        config_data.update(overrides or {})

        config = cls.from_dict(config_data)
        config.validate()
        return config

    @classmethod
    def create_preset(cls, preset: str, **kwargs) -> "RunConfig":
        """Convenience helper for common run setups."""
        presets = {
            "default": {},
            "every_bar": {"run_tests_once": False},
            "quiet": {"enable_logging": False, "show_results_on_chart": False},
            "immediate": {"start_test_at_bar": 0},
            "strict": {"distinguish_errors": True},
        }

        if preset not in presets:
            available = ", ".join(sorted(presets.keys()))
            raise ValueError(f"Unknown run preset '{preset}'. Available: {available}")

        params = presets[preset].copy()
        params.update(kwargs)

        return cls(**params)

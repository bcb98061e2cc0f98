"""Bar-driven test framework.

Runs declaratively tagged test suites inside a host that processes price
bars one at a time:
- Explicit suite registry with lazy per-module loading
- Discovery filters and bar-dependent gates
- Per-unit execution with setup/teardown, timeout and skip policy
- Structured results, polars summaries and line-based reports
- AgentPy bar feed that stands in for a live host
"""

__version__ = "0.1.0"

# Metadata and registration
from .tags import SuiteTag, UnitTag, RUN_AT_UNSET
from .registry import (
    SuiteRegistration,
    TestRegistry,
    default_registry,
    include_module,
    make_registration,
    register_suite,
    suite,
)
from .errors import (
    AssertionFailed,
    Inconclusive,
    InvocationError,
    RegistrationError,
    ResultFrozenError,
    UnitTimeout,
)

# Host boundary and context
from .host import Annotation, BarPeriod, HostEnvironment, Series, SeriesHost
from .context import TestContext
from .base import BarTestBase

# Discovery and execution
from .discovery import DiscoveryResult, SuiteDescriptor, UnitDescriptor, discover
from .engine import ExecutionEngine
from .results import EnvironmentSnapshot, UnitResult, UnitStatus

# Reporting
from .metrics import RunSummary, results_to_dataframe, summarize, group_by_suite, suite_breakdown
from .report import BufferSink, ConsoleSink, LineSink, NullSink, TestLogger

# Runner, configuration and feed
from .config import RunConfig
from .runner import RunReport, TestRunner, run_all
from .feed import BarFeedModel, FeedRun, run_feed
from .logging_util import get_logger, setup_logging

__all__ = [
    # Metadata and registration
    "SuiteTag",
    "UnitTag",
    "RUN_AT_UNSET",
    "SuiteRegistration",
    "TestRegistry",
    "default_registry",
    "include_module",
    "make_registration",
    "register_suite",
    "suite",

    # Errors
    "AssertionFailed",
    "Inconclusive",
    "InvocationError",
    "RegistrationError",
    "ResultFrozenError",
    "UnitTimeout",

    # Host and context
    "Annotation",
    "BarPeriod",
    "HostEnvironment",
    "Series",
    "SeriesHost",
    "TestContext",
    "BarTestBase",

    # Discovery and execution
    "DiscoveryResult",
    "SuiteDescriptor",
    "UnitDescriptor",
    "discover",
    "ExecutionEngine",
    "EnvironmentSnapshot",
    "UnitResult",
    "UnitStatus",

    # Reporting
    "RunSummary",
    "results_to_dataframe",
    "summarize",
    "group_by_suite",
    "suite_breakdown",
    "BufferSink",
    "ConsoleSink",
    "LineSink",
    "NullSink",
    "TestLogger",

    # Runner
    "RunConfig",
    "RunReport",
    "TestRunner",
    "run_all",
    "BarFeedModel",
    "FeedRun",
    "run_feed",
    "get_logger",
    "setup_logging",
]

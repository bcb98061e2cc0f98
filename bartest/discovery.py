"""Discovery: turn registry records into an ordered, filtered worklist."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import RunConfig
from .host import HostEnvironment
from .logging_util import get_logger
from .registry import SuiteRegistration, TestRegistry, default_registry
from .tags import SuiteTag, UnitTag

logger = get_logger("discovery")


@dataclass(frozen=True)
class UnitDescriptor:
    method_name: str
    tag: UnitTag

    @property
    def display_name(self) -> str:
        return self.tag.name or self.method_name


@dataclass(frozen=True)
class SuiteDescriptor:
    suite_type: type
    tag: SuiteTag
    namespace: str
    units: Tuple[UnitDescriptor, ...]
    gate_reason: Optional[str] = None

    @property
    def name(self) -> str:
        return self.suite_type.__name__

    @property
    def display_name(self) -> str:
        return self.tag.name or self.name

    @property
    def is_gated(self) -> bool:
        return self.gate_reason is not None


@dataclass
class DiscoveryResult:
    suites: List[SuiteDescriptor] = field(default_factory=list)
    skipped_groups: List[str] = field(default_factory=list)

    @property
    def total_units(self) -> int:
        return sum(len(s.units) for s in self.suites)

    def __len__(self) -> int:
        return len(self.suites)


def is_selected(record: SuiteRegistration, config: RunConfig, host: HostEnvironment) -> bool:
    """Filters and bar gates that omit a suite from the run entirely."""
    tag = record.tag
    if not tag.enabled:
        return False
    if config.namespace_filter and not record.namespace.startswith(config.namespace_filter):
        return False
    if config.name_filter and config.name_filter not in record.type_name:
        return False
    if config.tag_filter and not tag.has_any_tag(config.tag_filter):
        return False
    if config.category_filter and tag.category.lower() != config.category_filter.lower():
        return False
    if tag.has_run_at and tag.run_at_bar != host.current_bar:
        return False
    if tag.run_every_n_bars > 0 and host.current_bar % tag.run_every_n_bars != 0:
        return False
    return True


def gate_reason(tag: SuiteTag, host: HostEnvironment) -> Optional[str]:
    """Reason the suite cannot run on this host right now, or None."""
    if tag.min_bars > 0 and host.count < tag.min_bars:
        return f"Requires at least {tag.min_bars} bars, only {host.count} loaded"

    if tag.required_period_type:
        period = host.period
        if period.period_type.lower() != tag.required_period_type.lower():
            return f"Requires {tag.required_period_type} bars, host is {period}"
        if tag.required_period_value > 0 and period.value != tag.required_period_value:
            return (
                f"Requires {tag.required_period_value} {tag.required_period_type} bars, "
                f"host is {period}"
            )

    if tag.require_condition and not host.condition_active(tag.require_condition):
        return f"Requires condition '{tag.require_condition}'"

    return None


def resolve_units(record: SuiteRegistration) -> Tuple[UnitDescriptor, ...]:
    """Enabled units of a record, checked against the suite type."""
    units = []
    for method_name, unit_tag in record.units.items():
        if not callable(getattr(record.suite_type, method_name, None)):
            raise AttributeError(f"{record.type_name} has no callable '{method_name}'")
        if unit_tag.enabled:
            units.append(UnitDescriptor(method_name, unit_tag))
    units.sort(key=lambda u: u.tag.priority)
    return tuple(units)


def discover(registry: Optional[TestRegistry], config: RunConfig,
             host: HostEnvironment) -> DiscoveryResult:
    """Build the ordered worklist for one run.

    A group that fails to load is skipped and logged; a suite whose unit
    listing does not match its type is skipped and logged. Neither stops
    discovery of the remaining suites.
    """
    if registry is None:
        registry = default_registry

    result = DiscoveryResult()
    seen = set()

    for group in registry.groups():
        try:
            records = group.load()
        except Exception as e:
            logger.warning("Skipping suite group %s: %s: %s", group.namespace, type(e).__name__, e)
            result.skipped_groups.append(group.namespace)
            continue

        for record in records:
            if record.suite_type in seen:
                continue
            if not is_selected(record, config, host):
                continue

            try:
                units = resolve_units(record)
            except Exception as e:
                logger.warning("Skipping suite %s.%s: %s", record.namespace, record.type_name, e)
                continue

            if not units:
                logger.debug("Suite %s has no enabled units", record.type_name)
                continue

            seen.add(record.suite_type)
            result.suites.append(SuiteDescriptor(
                suite_type=record.suite_type,
                tag=record.tag,
                namespace=record.namespace,
                units=units,
                gate_reason=gate_reason(record.tag, host),
            ))

    result.suites.sort(key=lambda s: s.tag.priority)
    logger.debug("Discovered %d suites with %d units", len(result.suites), result.total_units)
    return result

"""Explicit registry of test suites.

Suites are made visible to discovery by registration calls, not by scanning
live modules. A registry is an ordered list of groups, one per namespace.
Eager groups hold records registered in-process; lazy groups import a
module at discovery time and ask it for its records, so a module that fails
to import only costs its own suites.
"""

import importlib
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Union

from .errors import RegistrationError
from .tags import SuiteTag, UnitTag

UnitSelection = Union[Mapping[str, UnitTag], List[str]]


@dataclass(frozen=True)
class SuiteRegistration:
    """Registration record: a suite type, its tag, and its tagged units in order."""
    suite_type: type
    tag: SuiteTag
    units: Dict[str, UnitTag] = field(default_factory=dict)

    @property
    def namespace(self) -> str:
        return self.suite_type.__module__

    @property
    def type_name(self) -> str:
        return self.suite_type.__name__


def make_registration(suite_type: type, tag: Optional[SuiteTag] = None,
                      units: Optional[UnitSelection] = None) -> SuiteRegistration:
    """Normalise a registration call into a record.

    ``units`` is either a mapping of method name to ``UnitTag`` or a plain
    list of method names (each gets a default tag). Order is preserved.
    """
    if not isinstance(suite_type, type):
        raise RegistrationError(f"Expected a class, got {suite_type!r}")
    if units is None:
        units = {}
    if isinstance(units, Mapping):
        normalised = {}
        for method_name, unit_tag in units.items():
            normalised[method_name] = unit_tag if unit_tag is not None else UnitTag()
    else:
        normalised = {method_name: UnitTag() for method_name in units}
    for method_name, unit_tag in normalised.items():
        if not isinstance(unit_tag, UnitTag):
            raise RegistrationError(f"{suite_type.__name__}.{method_name}: expected UnitTag, got {unit_tag!r}")
    return SuiteRegistration(suite_type, tag or SuiteTag(), normalised)


@dataclass
class SuiteGroup:
    """All registrations sharing one namespace."""
    namespace: str
    records: List[SuiteRegistration] = field(default_factory=list)
    loader: Optional[Callable[[], List[SuiteRegistration]]] = None

    @property
    def is_lazy(self) -> bool:
        return self.loader is not None

    def load(self) -> List[SuiteRegistration]:
        """Return this group's records; lazy groups import their module now."""
        if self.loader is None:
            return list(self.records)
        loaded = self.loader()
        return [r if isinstance(r, SuiteRegistration) else make_registration(*r) for r in loaded]


class TestRegistry:
    """Ordered collection of suite groups, the "type universe" of a run."""

    __test__ = False  # Not a pytest test class

    def __init__(self) -> None:
        self._groups: List[SuiteGroup] = []
        self._by_namespace: Dict[str, SuiteGroup] = {}
        self._registered_types = set()

    def register(self, suite_type: type, tag: Optional[SuiteTag] = None,
                 units: Optional[UnitSelection] = None) -> SuiteRegistration:
        record = make_registration(suite_type, tag, units)
        if suite_type in self._registered_types:
            raise RegistrationError(f"Suite {suite_type.__qualname__} is already registered")
        group = self._by_namespace.get(record.namespace)
        if group is None or group.is_lazy:
            group = SuiteGroup(record.namespace)
            self._groups.append(group)
            self._by_namespace[record.namespace] = group
        group.records.append(record)
        self._registered_types.add(suite_type)
        return record

    def suite(self, tag: Optional[SuiteTag] = None, units: Optional[UnitSelection] = None):
        """Class decorator form of ``register``."""
        def _wrap(cls: type) -> type:
            self.register(cls, tag, units)
            return cls
        return _wrap

    def include_module(self, module_name: str, hook: str = "register_suites") -> None:
        """Register a module whose suites are loaded lazily during discovery.

        The module must define ``hook()`` returning ``SuiteRegistration``
        records (or ``(suite_type, tag, units)`` tuples).
        """
        def _load() -> List[SuiteRegistration]:
            module = importlib.import_module(module_name)
            return list(getattr(module, hook)())

        group = SuiteGroup(module_name, loader=_load)
        self._groups.append(group)
        if module_name not in self._by_namespace:
            self._by_namespace[module_name] = group

    def groups(self) -> Iterator[SuiteGroup]:
        return iter(list(self._groups))

    def __len__(self) -> int:
        return sum(len(g.records) for g in self._groups)

    def clear(self) -> None:
        self._groups.clear()
        self._by_namespace.clear()
        self._registered_types.clear()


default_registry = TestRegistry()


def register_suite(suite_type: type, tag: Optional[SuiteTag] = None,
                   units: Optional[UnitSelection] = None) -> SuiteRegistration:
    return default_registry.register(suite_type, tag, units)


def suite(tag: Optional[SuiteTag] = None, units: Optional[UnitSelection] = None):
    return default_registry.suite(tag, units)


def include_module(module_name: str, hook: str = "register_suites") -> None:
    default_registry.include_module(module_name, hook)

"""Rule registry: find the rule modules and build validated rule instances."""

from __future__ import annotations

import importlib
import pkgutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import CheckerConfig
from .errors import ConfigurationError
from .logging import get_logger
from .result import OutputSink
from .rules import Capabilities, RuleModule

RULES_PACKAGE = "extcheck.rules"
RULE_MODULE_PREFIX = "check_"
FACTORY_NAME = "get_rule"

RuleFactory = Callable[..., RuleModule]

logger = get_logger("discovery")


@dataclass(frozen=True)
class RegisteredRule:
    """A rule instance together with its cached capabilities."""

    identifier: str
    rule: RuleModule
    capabilities: Capabilities


class RuleRegistry:
    """Ordered mapping of rule identifier to rule factory."""

    def __init__(self) -> None:
        self._factories: Dict[str, RuleFactory] = {}

    def __len__(self) -> int:
        return len(self._factories)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._factories

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return tuple(self._factories)

    def register(self, identifier: str, factory: RuleFactory) -> None:
        if not callable(factory):
            raise ConfigurationError(f"Rule {identifier} does not provide a callable factory")
        if identifier in self._factories:
            raise ConfigurationError(f"Rule {identifier} is registered twice")
        self._factories[identifier] = factory

    def instantiate(
        self,
        debug: bool,
        output: OutputSink,
        basedir: Path,
        namespace: str = "",
        config: Optional[CheckerConfig] = None,
    ) -> Tuple[RegisteredRule, ...]:
        """Build every registered rule, in registration order.

        Rules disabled in ``config`` are skipped; a factory returning an object
        that does not satisfy :class:`RuleModule` aborts with
        :class:`ConfigurationError`.
        """

        config = config or CheckerConfig()
        disabled = set(config.disabled_rules)
        unknown = sorted(disabled - set(self._factories))
        if unknown:
            raise ConfigurationError(f"Cannot disable unknown rules: {', '.join(unknown)}")

        rules: List[RegisteredRule] = []
        for identifier, factory in self._factories.items():
            if identifier in disabled:
                output.debug_trace(f"Skipping disabled rule {identifier}")
                continue
            instance = factory(debug, output, basedir, namespace, config)
            if not isinstance(instance, RuleModule):
                raise ConfigurationError(
                    f"{identifier} doesn't implement the rule interface, but matches the rule naming convention"
                )
            capabilities = Capabilities.probe(instance)
            if capabilities.is_empty:
                logger.warning("Rule %s does not ask for any directory, file or line checks", identifier)
            output.debug_trace(f"Loaded rule {identifier}")
            rules.append(RegisteredRule(identifier=identifier, rule=instance, capabilities=capabilities))
        return tuple(rules)


def iter_rule_modules(package: str = RULES_PACKAGE) -> Iterable[str]:
    """Yield the fully qualified names of rule modules in ``package``, name-sorted."""

    module = importlib.import_module(package)
    names = sorted(
        info.name
        for info in pkgutil.iter_modules(module.__path__)
        if info.name.startswith(RULE_MODULE_PREFIX) and not info.ispkg
    )
    for name in names:
        yield f"{package}.{name}"


def discover_rules(package: str = RULES_PACKAGE) -> RuleRegistry:
    """Scan ``package`` once and register a factory per ``check_*`` module."""

    registry = RuleRegistry()
    for qualified_name in iter_rule_modules(package):
        logger.debug("Got rule module %s", qualified_name)
        try:
            module = importlib.import_module(qualified_name)
        except Exception as exc:  # module-level code of a rule module can raise anything
            raise ConfigurationError(
                f"Rule module {qualified_name} could not be loaded: {type(exc).__name__}: {exc}"
            ) from exc
        factory = getattr(module, FACTORY_NAME, None)
        if factory is None:
            raise ConfigurationError(f"{qualified_name} matches the rule naming convention but has no {FACTORY_NAME}()")
        identifier = qualified_name.rsplit(".", 1)[1][len(RULE_MODULE_PREFIX) :]
        registry.register(identifier, factory)
    return registry

\
from __future__ import annotations
import importlib
import pkgutil
from typing import Dict, Type

from ..parsers.base import ParserPlugin
from ..rules.base import REGISTRY, Rule


def _import_package_modules(pkg) -> None:
    for m in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        importlib.import_module(m.name)


def _discover_package_classes(pkg, base_cls) -> Dict[str, Type]:
    discovered: Dict[str, Type] = {}
    for m in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        module = importlib.import_module(m.name)
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if isinstance(obj, type) and issubclass(obj, base_cls) and obj is not base_cls:
                name = getattr(obj, "NAME", obj.__name__).lower()
                discovered[name] = obj
    return discovered


def discover_parser_plugins() -> Dict[str, ParserPlugin]:
    from .. import parsers as parsers_pkg  # lazy import
    classes = _discover_package_classes(parsers_pkg, ParserPlugin)
    return {name: cls() for name, cls in classes.items()}


def discover_rules() -> Dict[str, Rule]:
    """Import every module of ``dolint.rules`` and return the registry, sorted by id."""
    from .. import rules as rules_pkg  # lazy import
    _import_package_modules(rules_pkg)
    return {rule_id: REGISTRY[rule_id] for rule_id in sorted(REGISTRY)}

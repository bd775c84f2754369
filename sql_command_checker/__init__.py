"""Convenience re-exports for the public API.

Importing this package exposes commonly used classes and helpers so consumers
can simply ``from sql_command_checker import CommandAnalyzer`` without digging
into submodules.

Example:
    >>> from sql_command_checker import CommandAnalyzer, SQLValidator
    >>> analyzer = CommandAnalyzer(SQLValidator())
"""


from importlib import import_module

def _load(name: str):
    module_map = {
        "CommandAnalyzer": "analyzer",
        "BindingTracer": "binding_tracer",
        "CheckerSettings": "config",
        "load_settings": "config",
        "CollectingSink": "emitter",
        "Settings": "logger",
        "init_logger": "logger",
        "log_call": "logger",
        "StatementResolver": "resolver",
        "SitePool": "site_pool",
        "SourceModel": "source_model",
        "SQLValidator": "sql_validator",
        "FatalValidationError": "sql_validator",
    }
    mod = import_module(f".{module_map[name]}", __name__)
    return getattr(mod, name)


__all__ = [
    "CommandAnalyzer",
    "BindingTracer",
    "CheckerSettings",
    "load_settings",
    "CollectingSink",
    "Settings",
    "init_logger",
    "log_call",
    "StatementResolver",
    "SitePool",
    "SourceModel",
    "SQLValidator",
    "FatalValidationError",
]


def __getattr__(name: str):
    if name in __all__:
        return _load(name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

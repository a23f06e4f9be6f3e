import importlib.util
import inspect
import types
from typing import Callable

from pad_probe.errors import PluginLoadError, PluginSignatureError

# (forged_block_hex, target_block_hex) -> padding valid?
OracleFn = Callable[[str, str], bool]

PLUGIN_FUNC_NAME = "check"


def load_module_from_file(module_file_path: str) -> types.ModuleType:
    """Load a Python module file."""
    spec = importlib.util.spec_from_file_location("oracle_plugin", module_file_path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Could not load spec for: {module_file_path}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)  # executes user code
    return mod


def load_oracle_fn(module_file_path: str) -> OracleFn:
    """Load the user defined oracle function from a Python module file."""
    mod = load_module_from_file(module_file_path)
    fn = getattr(mod, PLUGIN_FUNC_NAME, None)
    if fn is None or not callable(fn):
        raise PluginLoadError(
            f"Plugin must define `{PLUGIN_FUNC_NAME}(forged_block: str, target_block: str) -> bool`"
        )

    sig = inspect.signature(fn)
    params = list(sig.parameters.values())
    if len(params) != 2 or any(
        p.kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        for p in params
    ):
        raise PluginSignatureError(
            f"{PLUGIN_FUNC_NAME} must accept exactly two positional args: (forged_block: str, target_block: str)"
        )
    return fn

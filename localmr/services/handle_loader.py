# Standard library imports for dynamic loading and signature checks
import importlib
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

# Internal imports for configuration errors and logging
from localmr.errors import ConfigurationError
from localmr.models.job import Handle, JobConfig
from localmr.utils.logger import get_logger


@dataclass(frozen=True)
class ResolvedHandles:
    """User logic of one job, resolved to callables."""
    mapper: Callable[..., Any]
    reducer: Callable[..., Any]
    combiner: Optional[Callable[..., Any]] = None
    finalizer: Optional[Callable[..., Any]] = None


class HandleLoader:
    """
    Resolves and validates the user logic handles of a job.

    Handles are resolved once, when the job is validated, so that a typo in an
    import string or a function with the wrong signature fails the job before
    any data is read:
    - Import strings ("package.module:attribute") are imported and looked up
    - The result must be callable
    - The callable must accept the positional arguments the engine passes

    Expected call shapes:
    - mapper(record, emit)
    - reducer(key, values, emit)
    - combiner(key, values) -> values
    - finalizer(pairs) -> pairs
    """

    ARITY: Dict[str, int] = {
        "mapper": 2,
        "reducer": 3,
        "combiner": 2,
        "finalizer": 1,
    }

    def __init__(self):
        self.logger = get_logger(__name__)

    def load(self, config: JobConfig) -> ResolvedHandles:
        """
        Resolve every handle configured on the job.

        Raises:
            ConfigurationError: If map or reduce logic is missing, or any
                configured handle cannot be resolved or has the wrong signature.
        """
        if config.mapper is None:
            raise ConfigurationError(
                "Map logic handle 'mapper' not defined; set JobConfig(mapper=...)"
            )
        if config.reducer is None:
            raise ConfigurationError(
                "Reduce logic handle 'reducer' not defined; set JobConfig(reducer=...)"
            )

        handles = ResolvedHandles(
            mapper=self.resolve(config.mapper, "mapper"),
            reducer=self.resolve(config.reducer, "reducer"),
            combiner=self.resolve(config.combiner, "combiner") if config.combiner is not None else None,
            finalizer=self.resolve(config.finalizer, "finalizer") if config.finalizer is not None else None,
        )
        self.logger.info(
            f"Resolved user logic: mapper={_describe(handles.mapper)} "
            f"reducer={_describe(handles.reducer)}"
        )
        return handles

    def resolve(self, handle: Handle, kind: str) -> Callable[..., Any]:
        """Turn one handle into a callable and check its signature"""
        if isinstance(handle, str):
            function = self._import(handle, kind)
        else:
            function = handle

        if not callable(function):
            raise ConfigurationError(f"{kind} handle {handle!r} is not callable")

        self._check_signature(function, kind)
        return function

    def _import(self, spec: str, kind: str) -> Any:
        module_name, sep, attribute = spec.partition(":")
        if not sep or not module_name or not attribute:
            raise ConfigurationError(
                f"Invalid {kind} handle {spec!r}: expected 'package.module:attribute'"
            )
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ConfigurationError(f"Cannot import module {module_name!r} for {kind}: {e}") from e

        target: Any = module
        for part in attribute.split("."):
            try:
                target = getattr(target, part)
            except AttributeError as e:
                raise ConfigurationError(
                    f"Module {module_name!r} has no attribute {attribute!r} for {kind}"
                ) from e
        return target

    def _check_signature(self, function: Callable[..., Any], kind: str):
        arity = self.ARITY[kind]
        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError):
            # Builtins and some C callables expose no signature
            self.logger.debug(f"No signature available for {kind} {_describe(function)}")
            return

        try:
            signature.bind(*([None] * arity))
        except TypeError as e:
            raise ConfigurationError(
                f"{kind} {_describe(function)} must accept {arity} positional "
                f"arguments, signature is {signature}"
            ) from e


def _describe(function: Callable[..., Any]) -> str:
    module = getattr(function, "__module__", None)
    name = getattr(function, "__qualname__", None) or repr(function)
    return f"{module}:{name}" if module else name

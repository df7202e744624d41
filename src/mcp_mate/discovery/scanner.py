"""Capability scanning.

The loader only depends on the CapabilityScanner protocol. ModuleScanner is
the default implementation: it loads Python source files and collects the
callables declared with the decorators from ``mcp_mate.capability``.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import sys
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

from mcp.types import Prompt, PromptArgument, Resource, ResourceTemplate, Tool
from pydantic import ConfigDict, PydanticUserError, ValidationError, create_model

from mcp_mate.capability import CapabilityMetadata, CapabilityRegistrar, get_capability_metadata
from mcp_mate.errors import ScanError
from mcp_mate.registry import (
    RegisteredEntry,
    RegisteredPrompt,
    RegisteredResource,
    RegisteredResourceTemplate,
    RegisteredTool,
)
from mcp_mate.types import CapabilityKind

logger = logging.getLogger(__name__)

# Module-level hook include files may define
REGISTER_HOOK = "register"


@dataclass
class ScanResult:
    """Capabilities found in a set of directories and include files."""

    tools: list[RegisteredTool] = field(default_factory=list)
    resources: list[RegisteredResource] = field(default_factory=list)
    prompts: list[RegisteredPrompt] = field(default_factory=list)
    resource_templates: list[RegisteredResourceTemplate] = field(default_factory=list)

    def add(self, entry: RegisteredEntry) -> None:
        getattr(self, entry.kind.attribute).append(entry)

    def extend(self, other: ScanResult) -> None:
        for entry in other.entries():
            self.add(entry)

    def entries(self) -> list[RegisteredEntry]:
        return [*self.tools, *self.resources, *self.prompts, *self.resource_templates]


class CapabilityScanner(Protocol):
    """Finds capability declarations in directories and explicit files.

    Must return an empty result for empty inputs and raise ScanError for a
    path it cannot read.
    """

    def scan(self, directories: Sequence[str], include_files: Sequence[str]) -> ScanResult: ...


# === Descriptor construction ===


def _summary(handler: Callable[..., Any]) -> str | None:
    doc = inspect.getdoc(handler)
    if not doc:
        return None
    first_paragraph = doc.split("\n\n", 1)[0]
    return " ".join(line.strip() for line in first_paragraph.splitlines())


def _parameters(handler: Callable[..., Any]) -> list[inspect.Parameter]:
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return []
    return [
        p
        for p in signature.parameters.values()
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        and not p.name.startswith("_")
    ]


def build_input_schema(handler: Callable[..., Any]) -> dict[str, Any]:
    """Derive a JSON schema for a tool from its handler signature."""
    params = _parameters(handler)
    try:
        hints = typing.get_type_hints(handler, include_extras=True)
    except (AttributeError, NameError, TypeError):
        hints = {}

    fields: dict[str, Any] = {}
    for param in params:
        annotation = hints.get(param.name, Any)
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[param.name] = (annotation, default)

    try:
        model = create_model(
            "Arguments",
            __config__=ConfigDict(arbitrary_types_allowed=True),
            **fields,
        )
        schema = model.model_json_schema()
    except PydanticUserError as e:
        logger.debug(f"Falling back to untyped schema for {handler!r}: {e}")
        schema = {
            "type": "object",
            "properties": {p.name: {} for p in params},
            "required": [p.name for p in params if p.default is inspect.Parameter.empty],
        }

    schema.pop("title", None)
    schema.setdefault("properties", {})
    return schema


def _prompt_arguments(handler: Callable[..., Any]) -> list[PromptArgument]:
    return [
        PromptArgument(name=p.name, required=p.default is inspect.Parameter.empty)
        for p in _parameters(handler)
    ]


def build_entry(
    metadata: CapabilityMetadata, handler: Callable[..., Any], handler_ref: str
) -> RegisteredEntry:
    """Turn a declaration into a registry entry with its MCP descriptor."""
    name = metadata.name or getattr(handler, "__name__", type(handler).__name__)
    description = metadata.description or _summary(handler)

    if metadata.kind is CapabilityKind.TOOL:
        tool = Tool(name=name, description=description, inputSchema=build_input_schema(handler))
        return RegisteredTool(tool=tool, handler=handler, handler_ref=handler_ref)

    if metadata.kind is CapabilityKind.PROMPT:
        prompt = Prompt(name=name, description=description, arguments=_prompt_arguments(handler))
        return RegisteredPrompt(prompt=prompt, handler=handler, handler_ref=handler_ref)

    if not metadata.uri:
        raise ValueError(f"{metadata.kind.value} {name!r} declares no URI")

    if metadata.kind is CapabilityKind.RESOURCE:
        resource = Resource(
            uri=metadata.uri,
            name=name,
            description=description,
            mimeType=metadata.mime_type,
        )
        return RegisteredResource(
            resource=resource, uri=metadata.uri, handler=handler, handler_ref=handler_ref
        )

    template = ResourceTemplate(
        uriTemplate=metadata.uri,
        name=name,
        description=description,
        mimeType=metadata.mime_type,
    )
    return RegisteredResourceTemplate(template=template, handler=handler, handler_ref=handler_ref)


# === Module scanning ===


def _package_root(file: Path) -> Path | None:
    """Outermost directory with an ``__init__.py`` above ``file``, if any."""
    root = None
    directory = file.parent
    while (directory / "__init__.py").is_file():
        root = directory
        if directory.parent == directory:
            break
        directory = directory.parent
    return root


class ModuleScanner:
    """Scans Python source files for decorated capability handlers.

    Files inside a regular package are imported under their dotted name, with
    the package's parent directory added to ``sys.path``, so intra-package
    imports work. Loose files are loaded as standalone modules.
    """

    def __init__(self, base_path: Path | str) -> None:
        self._base_path = Path(base_path)
        self._modules: dict[Path, ModuleType] = {}

    def scan(self, directories: Sequence[str], include_files: Sequence[str]) -> ScanResult:
        result = ScanResult()
        for directory in directories:
            result.extend(self._scan_directory(self._resolve(directory)))
        for include in include_files:
            result.extend(self._scan_include(self._resolve(include)))
        return result

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self._base_path / candidate
        return candidate

    def _display(self, path: Path) -> str:
        try:
            return path.relative_to(self._base_path).as_posix()
        except ValueError:
            return path.as_posix()

    def _scan_directory(self, directory: Path) -> ScanResult:
        if not directory.is_dir():
            raise ScanError(directory, "directory does not exist")

        try:
            files = sorted(
                p
                for p in directory.rglob("*.py")
                if not any(
                    part == "__pycache__" or part.startswith(".")
                    for part in p.relative_to(directory).parts[:-1]
                )
            )
        except OSError as e:
            raise ScanError(directory, str(e)) from e

        result = ScanResult()
        for file in files:
            # A broken file only loses its own declarations
            try:
                module = self._load_module(file)
                result.extend(self._collect_declarations(module, file))
            except ScanError as e:
                logger.warning(f"Skipping {self._display(file)}: {e.reason}")
        logger.debug(f"Scanned {len(files)} files in {directory}")
        return result

    def _scan_include(self, file: Path) -> ScanResult:
        if not file.is_file():
            raise ScanError(file, "include file does not exist")

        module = self._load_module(file)
        result = self._collect_declarations(module, file)

        hook = getattr(module, REGISTER_HOOK, None)
        if callable(hook) and get_capability_metadata(hook) is None:
            registrar = CapabilityRegistrar()
            try:
                hook(registrar)
            except Exception as e:
                raise ScanError(file, f"{REGISTER_HOOK}() failed: {e}") from e
            for metadata, handler in registrar.entries:
                result.add(self._build(metadata, handler, module, file))
        return result

    def _load_module(self, file: Path) -> ModuleType:
        resolved = file.resolve()
        cached = self._modules.get(resolved)
        if cached is not None:
            return cached

        package_root = _package_root(resolved)
        if package_root is None:
            module = self._load_standalone(file, resolved)
        else:
            module = self._import_from_package(file, resolved, package_root)

        self._modules[resolved] = module
        return module

    def _load_standalone(self, file: Path, resolved: Path) -> ModuleType:
        digest = hashlib.sha1(str(resolved).encode()).hexdigest()[:12]
        module_name = f"_mate_scan_{digest}_{resolved.stem}"

        spec = importlib.util.spec_from_file_location(module_name, resolved)
        if spec is None or spec.loader is None:
            raise ScanError(file, "not a loadable Python module")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ScanError(file, f"{type(e).__name__}: {e}") from e
        return module

    def _import_from_package(self, file: Path, resolved: Path, package_root: Path) -> ModuleType:
        import_root = package_root.parent
        parts = list(resolved.relative_to(import_root).with_suffix("").parts)
        if parts[-1] == "__init__":
            parts.pop()
        dotted_name = ".".join(parts)

        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))
            importlib.invalidate_caches()

        try:
            module = importlib.import_module(dotted_name)
        except Exception as e:
            raise ScanError(file, f"{type(e).__name__}: {e}") from e

        loaded_from = getattr(module, "__file__", None)
        if loaded_from is None or Path(loaded_from).resolve() != resolved:
            raise ScanError(file, f"module {dotted_name} is already imported from {loaded_from}")
        return module

    def _collect_declarations(self, module: ModuleType, file: Path) -> ScanResult:
        result = ScanResult()
        for obj in vars(module).values():
            metadata = get_capability_metadata(obj)
            # Skip handlers merely imported from another module
            if metadata is None or getattr(obj, "__module__", None) != module.__name__:
                continue
            result.add(self._build(metadata, obj, module, file))
        return result

    def _build(
        self,
        metadata: CapabilityMetadata,
        handler: Callable[..., Any],
        module: ModuleType,
        file: Path,
    ) -> RegisteredEntry:
        qualname = getattr(handler, "__qualname__", type(handler).__qualname__)
        handler_module = getattr(handler, "__module__", None)
        if handler_module == module.__name__:
            handler_ref = f"{self._display(file)}:{qualname}"
        else:
            handler_ref = f"{handler_module}:{qualname}"

        try:
            return build_entry(metadata, handler, handler_ref)
        except (ValidationError, ValueError) as e:
            raise ScanError(file, f"invalid {metadata.kind.value} declaration: {e}") from e

"""Extraction of the documentation model from a configuration section tree."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .categories import CATEGORY_OVERRIDES, Category, CategoryOverrides
from .errors import FieldTypeError, ShapeError, UnsupportedTypeError
from .fieldtypes import classify, custom_field_type, is_function_type, plain_class
from .flags import Flag, FlagRegistry, collect_flags, resolve_flag
from .model import BlockEntry, ConfigBlock, FieldEntry, FieldExample
from .roots import RootBlockRegistry
from .schema import is_frozen
from .tags import UNUSED_FIELD_PREFIX, FieldAnnotations, read_annotations
from .values import ExampleProvider

PREFIX_PLACEHOLDER = "<prefix>"


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def section_type_of(annotation: Any) -> Optional[type[BaseModel]]:
    cls = plain_class(annotation)
    if cls is not None and issubclass(cls, BaseModel):
        return cls
    return None


def field_example(name: str, annotation: Any) -> Optional[FieldExample]:
    """Return the example a value type provides, keyed by the field name."""

    cls = plain_class(annotation)
    if cls is None or not issubclass(cls, ExampleProvider):
        return None
    comment, value = cls().example_doc()
    return FieldExample(comment=comment, value={name: value})


def find_flag_prefixes(flags: List[str]) -> List[str]:
    """Return the distinct dotted prefix of each flag name.

    Trailing segments shared by every flag are removed, e.g.
    ``["ingester.client.timeout", "querier.client.timeout"]`` yields
    ``["ingester", "querier"]``.
    """

    if not flags:
        return []
    tokens = [flag.split(".") for flag in flags]
    for _ in range(min(len(parts) for parts in tokens)):
        last = tokens[0][-1]
        if any(parts[-1] != last for parts in tokens):
            break
        tokens = [parts[:-1] for parts in tokens]
    return [".".join(parts) for parts in tokens]


def _first_flag(block: ConfigBlock) -> Optional[str]:
    for entry in block.entries:
        if isinstance(entry, FieldEntry) and entry.flag_name:
            return entry.flag_name
    return None


def _strip_flag_prefix(block: ConfigBlock, prefix: str) -> None:
    marker = prefix + "."
    for entry in block.entries:
        if isinstance(entry, BlockEntry):
            if not entry.is_root:
                _strip_flag_prefix(entry.block, prefix)
        elif entry.flag_name and entry.flag_name.startswith(marker):
            entry.flag_template = f"{PREFIX_PLACEHOLDER}.{entry.flag_name[len(marker):]}"


class Walker:
    """State of one extraction run.

    Promoted root blocks are kept by section type so that a type recurring in
    the tree is documented by a single :class:`ConfigBlock` instance.
    """

    def __init__(
        self,
        flags: FlagRegistry,
        *,
        roots: Optional[RootBlockRegistry] = None,
        categories: Optional[CategoryOverrides] = None,
    ) -> None:
        self.flags = flags
        self.roots = roots if roots is not None else RootBlockRegistry()
        self.categories = categories if categories is not None else CATEGORY_OVERRIDES
        self._promoted: Dict[type, ConfigBlock] = {}
        self._occurrences: Dict[type, List[Optional[str]]] = {}

    def extract(self, block: Optional[ConfigBlock], cfg: Any) -> List[ConfigBlock]:
        """Document ``cfg`` into ``block``.

        With ``block`` set to ``None`` a new top-level block is created and
        returned first. The root blocks discovered during the traversal follow,
        once each.
        """

        _check_shape(cfg)
        blocks: List[ConfigBlock] = []
        if block is None:
            block = ConfigBlock()
            blocks.append(block)
        blocks.extend(self._walk(block, cfg, ""))
        return blocks

    def annotate_flag_prefixes(self) -> None:
        """Record the flag prefixes of root blocks mounted more than once.

        Fields of such a block keep their registered flag name and gain a
        ``flag_template`` relative to the prefix of the occurrence the block
        was built from.
        """

        for section_type, first_flags in self._occurrences.items():
            names = [name for name in first_flags if name]
            if len(names) < 2:
                continue
            prefixes = find_flag_prefixes(names)
            block = self._promoted[section_type]
            block.flag_prefix = prefixes[0]
            block.flag_prefixes = prefixes
            logger.debug("Root block {} mounted with prefixes {}", block.name, prefixes)
            if block.flag_prefix:
                _strip_flag_prefix(block, block.flag_prefix)

    def _walk(self, block: ConfigBlock, cfg: BaseModel, path: str) -> List[ConfigBlock]:
        section_type = type(cfg)
        promoted: List[ConfigBlock] = []

        for attribute, info in section_type.model_fields.items():
            field_path = f"{path}.{attribute}" if path else attribute
            annotations = read_annotations(attribute, info, field_path)
            if annotations.name:
                field_path = f"{path}.{annotations.name}" if path else annotations.name

            if annotations.hidden:
                continue
            if not annotations.name and not annotations.inline:
                continue
            if is_function_type(info.annotation):
                continue
            if attribute.startswith(UNUSED_FIELD_PREFIX):
                continue

            custom = self._custom_entry(cfg, attribute, info, annotations)
            if custom is not None:
                block.add(custom)
                continue

            nested_type = section_type_of(info.annotation)
            if nested_type is not None:
                value = getattr(cfg, attribute)
                if value is None:
                    value = nested_type()
                promoted.extend(
                    self._nested(block, value, nested_type, annotations, path, field_path)
                )
                continue

            try:
                field_type = classify(info.annotation)
            except UnsupportedTypeError as exc:
                raise FieldTypeError(qualified_name(section_type), field_path, str(exc)) from exc

            flag = resolve_flag(cfg, attribute, self.flags, nocli=annotations.nocli)
            block.add(
                FieldEntry(
                    name=annotations.name,
                    field_type=field_type,
                    required=annotations.required,
                    flag_name=flag.name if flag else None,
                    description=annotations.description or (flag.usage if flag else ""),
                    default=_default(annotations, flag),
                    example=field_example(annotations.name, info.annotation),
                    category=self._category(annotations, flag),
                )
            )

        return promoted

    def _nested(
        self,
        block: ConfigBlock,
        value: BaseModel,
        nested_type: type[BaseModel],
        annotations: FieldAnnotations,
        path: str,
        field_path: str,
    ) -> List[ConfigBlock]:
        if annotations.inline:
            return self._walk(block, value, path)

        root = self.roots.lookup(nested_type)
        if root is None:
            child = ConfigBlock(name=annotations.name, description=annotations.description or "")
            block.add(BlockEntry(name=annotations.name, block=child, required=annotations.required))
            return self._walk(child, value, field_path)

        shared = self._promoted.get(nested_type)
        if shared is not None:
            block.add(
                BlockEntry(name=annotations.name, block=shared, required=annotations.required, is_root=True)
            )
            # Walked only to learn the flags this occurrence registered.
            scratch = ConfigBlock(name=root.name)
            self._walk(scratch, value, field_path)
            self._occurrences[nested_type].append(_first_flag(scratch))
            return []

        logger.debug("Promoting {} at {} to root block {}", nested_type.__qualname__, field_path, root.name)
        child = ConfigBlock(name=root.name, description=root.description)
        self._promoted[nested_type] = child
        block.add(BlockEntry(name=annotations.name, block=child, required=annotations.required, is_root=True))
        found = [child]
        found.extend(self._walk(child, value, field_path))
        self._occurrences[nested_type] = [_first_flag(child)]
        return found

    def _custom_entry(
        self,
        cfg: Any,
        attribute: str,
        info: FieldInfo,
        annotations: FieldAnnotations,
    ) -> Optional[FieldEntry]:
        field_type = custom_field_type(info.annotation)
        if field_type is None:
            return None
        flag = resolve_flag(cfg, attribute, self.flags, nocli=annotations.nocli)
        return FieldEntry(
            name=annotations.name,
            field_type=field_type,
            required=annotations.required,
            flag_name=flag.name if flag else None,
            description=annotations.description or (flag.usage if flag else ""),
            default=_default(annotations, flag),
            category=self._category(annotations, flag),
        )

    def _category(self, annotations: FieldAnnotations, flag: Optional[Flag]) -> str:
        override = self.categories.get(flag.name if flag else None)
        if override is not None:
            return override.value
        return annotations.category or Category.BASIC.value


def _default(annotations: FieldAnnotations, flag: Optional[Flag]) -> Optional[str]:
    if annotations.default is not None:
        return annotations.default
    if flag is not None:
        return flag.default_text
    return None


def _check_shape(cfg: Any) -> None:
    where = "<root>"
    if isinstance(cfg, type):
        raise ShapeError(f"{where}: {cfg.__qualname__} is a type while a section instance is expected")
    if not isinstance(cfg, BaseModel):
        raise ShapeError(
            f"{where}: {type(cfg).__qualname__} is not a configuration section"
        )
    if is_frozen(cfg):
        raise ShapeError(
            f"{where}: {type(cfg).__qualname__} is frozen while a mutable section is expected"
        )


def extract(
    block: Optional[ConfigBlock],
    cfg: Any,
    flags: FlagRegistry,
    *,
    roots: Optional[RootBlockRegistry] = None,
    categories: Optional[CategoryOverrides] = None,
) -> List[ConfigBlock]:
    """Return the documentation blocks of ``cfg``.

    The first block is the fully expanded tree of ``cfg`` (when ``block`` is
    ``None``); every root block found in the tree follows exactly once.
    """

    walker = Walker(flags, roots=roots, categories=categories)
    return walker.extract(block, cfg)


def describe(
    config_type: type,
    *,
    roots: Optional[RootBlockRegistry] = None,
    categories: Optional[CategoryOverrides] = None,
) -> List[ConfigBlock]:
    """Document a configuration type from a throwaway instance.

    Flags are registered against the throwaway instance so the caller's own
    configuration objects are never touched.
    """

    if not isinstance(config_type, type) or not issubclass(config_type, BaseModel):
        raise ShapeError(f"{config_type!r} is not a configuration section type")
    cfg = config_type()
    flags = collect_flags(cfg)
    walker = Walker(flags, roots=roots, categories=categories)
    blocks = walker.extract(None, cfg)
    walker.annotate_flag_prefixes()
    return blocks


__all__ = [
    "PREFIX_PLACEHOLDER",
    "Walker",
    "describe",
    "extract",
    "find_flag_prefixes",
]

"""Migration descriptors: versioned, declarative statement lists.

A descriptor is a TOML file in one of two shapes.

Structured, for one protected table::

    name = "users-policies"
    version = 2
    table = "public.users"
    drop = ["Admins have full access"]

    [[policy]]
    name = "Users update own data"
    command = "UPDATE"
    using = "auth.uid() = id"

which expands to disable → drop (every listed name plus every replacement
name) → create → enable. Or raw, with ``statements = [...]`` or
``script = "file.sql"``. A bare ``.sql`` file is accepted as a raw
descriptor named after the file.
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path

from rlsfix.plan.split import ScriptError, split_script

_COMMANDS = frozenset({"ALL", "SELECT", "INSERT", "UPDATE", "DELETE"})
_NO_USING = frozenset({"INSERT"})
_NO_WITH_CHECK = frozenset({"SELECT", "DELETE"})

_IDENT = r"[A-Za-z_][A-Za-z0-9_$]*"
_TABLE_RE = re.compile(rf"^{_IDENT}(\.{_IDENT})?$")
_ROLE_RE = re.compile(rf"^{_IDENT}$")


class DescriptorError(ValueError):
    """Raised for descriptors that cannot be turned into a statement list."""


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class RuleDefinition:
    name: str
    command: str = "ALL"
    using: str | None = None
    with_check: str | None = None
    roles: tuple[str, ...] = ()
    permissive: bool = True

    def create_sql(self, table: str) -> str:
        parts = [f"CREATE POLICY {quote_ident(self.name)} ON {table}"]
        if not self.permissive:
            parts.append("AS RESTRICTIVE")
        parts.append(f"FOR {self.command}")
        if self.roles:
            parts.append("TO " + ", ".join(self.roles))
        if self.using is not None:
            parts.append(f"USING ({self.using})")
        if self.with_check is not None:
            parts.append(f"WITH CHECK ({self.with_check})")
        return " ".join(parts) + ";"


@dataclass(frozen=True)
class MigrationDescriptor:
    name: str
    version: int = 1
    description: str = ""
    table: str | None = None
    drop: tuple[str, ...] = ()
    rules: tuple[RuleDefinition, ...] = ()
    statements: tuple[str, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        return f"{self.name}@v{self.version}"

    def statement_texts(self) -> list[str]:
        """The ordered statement list this descriptor stands for."""
        if self.table is None:
            return list(self.statements)

        # Replacement names are dropped too, so a second run recreates them
        # instead of failing on duplicates.
        names = dict.fromkeys([*self.drop, *(r.name for r in self.rules)])
        return [
            f"ALTER TABLE {self.table} DISABLE ROW LEVEL SECURITY;",
            *(f"DROP POLICY IF EXISTS {quote_ident(n)} ON {self.table};" for n in names),
            *(r.create_sql(self.table) for r in self.rules),
            f"ALTER TABLE {self.table} ENABLE ROW LEVEL SECURITY;",
        ]


def _require_str(data: dict, key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise DescriptorError(f"{where}: '{key}' must be a non-empty string")
    return value


def _optional_str(data: dict, key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise DescriptorError(f"{where}: '{key}' must be a non-empty string")
    return value


def _parse_rule(data: dict, index: int) -> RuleDefinition:
    where = f"policy #{index + 1}"
    if not isinstance(data, dict):
        raise DescriptorError(f"{where}: expected a table")

    name = _require_str(data, "name", where)
    command = str(data.get("command", "ALL")).upper()
    if command not in _COMMANDS:
        valid = ", ".join(sorted(_COMMANDS))
        raise DescriptorError(f"{where}: unknown command '{command}'. Valid: {valid}")

    using = _optional_str(data, "using", where)
    with_check = _optional_str(data, "with_check", where)
    if using is None and with_check is None:
        raise DescriptorError(f"{where}: needs 'using', 'with_check' or both")
    if using is not None and command in _NO_USING:
        raise DescriptorError(f"{where}: {command} policies only take 'with_check'")
    if with_check is not None and command in _NO_WITH_CHECK:
        raise DescriptorError(f"{where}: {command} policies only take 'using'")

    roles = data.get("roles", [])
    if not isinstance(roles, list) or not all(
        isinstance(r, str) and _ROLE_RE.match(r) for r in roles
    ):
        raise DescriptorError(f"{where}: 'roles' must be a list of role names")

    permissive = data.get("permissive", True)
    if not isinstance(permissive, bool):
        raise DescriptorError(f"{where}: 'permissive' must be true or false")

    return RuleDefinition(
        name=name,
        command=command,
        using=using,
        with_check=with_check,
        roles=tuple(roles),
        permissive=permissive,
    )


def parse_descriptor(
    data: dict, *, default_name: str = "migration", base_dir: Path | None = None
) -> MigrationDescriptor:
    """Validate a decoded TOML document and build a descriptor."""
    name = data.get("name", default_name)
    if not isinstance(name, str) or not name:
        raise DescriptorError("'name' must be a non-empty string")

    version = data.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise DescriptorError("'version' must be a positive integer")

    description = data.get("description", "")
    shapes = [k for k in ("table", "statements", "script") if k in data]
    if len(shapes) != 1:
        raise DescriptorError(
            "descriptor needs exactly one of 'table', 'statements' or 'script'"
        )

    if "table" in data:
        table = _require_str(data, "table", "descriptor")
        if not _TABLE_RE.match(table):
            raise DescriptorError(f"invalid table name: {table!r}")
        drop = data.get("drop", [])
        if not isinstance(drop, list) or not all(isinstance(n, str) and n for n in drop):
            raise DescriptorError("'drop' must be a list of rule names")
        rules_raw = data.get("policy", [])
        if not isinstance(rules_raw, list):
            raise DescriptorError("'policy' must be an array of tables ([[policy]])")
        rules = tuple(_parse_rule(r, i) for i, r in enumerate(rules_raw))
        return MigrationDescriptor(
            name=name,
            version=version,
            description=description,
            table=table,
            drop=tuple(drop),
            rules=rules,
        )

    if "statements" in data:
        statements = data["statements"]
        if not isinstance(statements, list) or not all(
            isinstance(s, str) and s.strip() for s in statements
        ):
            raise DescriptorError("'statements' must be a list of SQL strings")
        texts = tuple(s.strip() for s in statements)
    else:
        script = _require_str(data, "script", "descriptor")
        script_path = Path(script)
        if not script_path.is_absolute() and base_dir is not None:
            script_path = base_dir / script_path
        texts = tuple(_read_script(script_path))

    if not texts:
        raise DescriptorError("descriptor has no statements")

    return MigrationDescriptor(
        name=name, version=version, description=description, statements=texts,
    )


def _read_script(path: Path) -> list[str]:
    try:
        sql = path.read_text()
    except OSError as e:
        raise DescriptorError(f"cannot read script {path}: {e}") from e
    try:
        return split_script(sql)
    except ScriptError as e:
        raise DescriptorError(f"{path}: {e}") from e


def load_descriptor(path: str | Path) -> MigrationDescriptor:
    """Load a ``.toml`` descriptor or a ``.sql`` script."""
    path = Path(path)
    if path.suffix.lower() == ".sql":
        texts = _read_script(path)
        if not texts:
            raise DescriptorError(f"{path}: script has no statements")
        return MigrationDescriptor(name=path.stem, statements=tuple(texts))

    try:
        data = tomllib.loads(path.read_text())
    except OSError as e:
        raise DescriptorError(f"cannot read descriptor {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise DescriptorError(f"{path}: invalid TOML: {e}") from e
    return parse_descriptor(data, default_name=path.stem, base_dir=path.parent)


def load_bundled(name: str) -> MigrationDescriptor:
    """Load one of the descriptors shipped in ``rlsfix.descriptors``."""
    resource = resources.files("rlsfix.descriptors") / f"{name}.toml"
    if not resource.is_file():
        raise DescriptorError(f"no bundled descriptor named '{name}'")
    return parse_descriptor(tomllib.loads(resource.read_text()), default_name=name)

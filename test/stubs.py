# python
"""
Stub files behavioral tests (typing surface shipped next to the modules).

Scope
- Validate that every public module has a .pyi stub beside it.
- Validate that each stub declares every name its module exports.

Conventions
- Test method names follow CamelCase per project convention.
- Stubs are read with ast, never imported.
"""

from __future__ import annotations

import ast
import importlib
import pathlib
import unittest
from unittest import TestCase

import kvargs

MODULES = ("arguments", "engine", "helps", "parsers", "records")


def declared(path):
    """Top-level names a stub file defines or re-exports."""
    names = set()
    for node in ast.parse(path.read_text(encoding="utf-8")).body:
        match node:
            case ast.FunctionDef(name=name) | ast.ClassDef(name=name) | ast.TypeAlias(name=ast.Name(id=name)):
                names.add(name)
            case ast.AnnAssign(target=ast.Name(id=name)):
                names.add(name)
            case ast.Assign(targets=targets):
                names.update(target.id for target in targets if isinstance(target, ast.Name))
            case ast.ImportFrom(names=aliases) | ast.Import(names=aliases):
                names.update(alias.asname for alias in aliases if alias.asname)
    return names


class TestStubs(TestCase):
    """Behavioral tests for the shipped stubs."""

    def testEveryPublicModuleHasStub(self):
        root = pathlib.Path(kvargs.__file__).parent
        self.assertTrue((root / "__init__.pyi").is_file())
        for name in MODULES:
            self.assertTrue((root / (name + ".pyi")).is_file(), name)

    def testStubsDeclareModuleExports(self):
        root = pathlib.Path(kvargs.__file__).parent
        for name in MODULES:
            module = importlib.import_module("kvargs." + name)
            stub = declared(root / (name + ".pyi"))
            for export in module.__all__:
                self.assertIn(export, stub, "%s.%s" % (name, export))

    def testPackageStubReexportsRecords(self):
        stub = declared(pathlib.Path(kvargs.__file__).parent / "__init__.pyi")
        for name in ("records", "Container", "declare", "todict"):
            self.assertIn(name, stub)
        self.assertNotIn("set", stub)


if __name__ == "__main__":
    unittest.main()

"""Tests for the symbol catalog."""

from scripts.doccov.models import CodeElement, ElementKind, ReferenceKind
from scripts.doccov.symbol_catalog import SymbolCatalog


def _catalog():
    return SymbolCatalog([
        CodeElement("User", ElementKind.CLASS, "src/User.php", 5, namespace="App"),
        CodeElement("save", ElementKind.METHOD, "src/User.php", 9, namespace="App", parent="User"),
        CodeElement("Order", ElementKind.CLASS, "src/Order.php", 5, namespace="App"),
        CodeElement("save", ElementKind.METHOD, "src/Order.php", 12, namespace="App", parent="Order"),
        CodeElement("status", ElementKind.PROPERTY, "src/Order.php", 7, namespace="App", parent="Order"),
        CodeElement("PAID", ElementKind.CONSTANT, "src/Order.php", 8, namespace="App", parent="Order"),
        CodeElement("save", ElementKind.FUNCTION, "src/helpers.php", 3),
    ])


class TestSymbolCatalog:
    """Tests for SymbolCatalog."""

    def test_collisions_preserved_in_order(self):
        catalog = _catalog()
        matches = catalog.lookup(ReferenceKind.METHOD, "save")
        assert [m.parent for m in matches] == ["User", "Order"]

    def test_method_lookup_ignores_functions(self):
        matches = _catalog().lookup(ReferenceKind.METHOD, "save")
        assert all(m.kind == ElementKind.METHOD for m in matches)

    def test_class_lookup_by_qualified_name(self):
        matches = _catalog().lookup(ReferenceKind.CLASS, "App\\User")
        assert [m.name for m in matches] == ["User"]

    def test_class_lookup_by_bare_name(self):
        matches = _catalog().lookup(ReferenceKind.CLASS, "Order")
        assert [(m.name, m.kind) for m in matches] == [("Order", ElementKind.CLASS)]

    def test_class_lookup_rejects_members(self):
        assert _catalog().lookup(ReferenceKind.CLASS, "save") == []

    def test_property_lookup_includes_constants(self):
        catalog = _catalog()
        assert [m.name for m in catalog.lookup(ReferenceKind.PROPERTY, "status")] == ["status"]
        assert [m.name for m in catalog.lookup(ReferenceKind.PROPERTY, "PAID")] == ["PAID"]

    def test_unknown_name(self):
        assert _catalog().lookup(ReferenceKind.METHOD, "missing") == []

    def test_link_kind_not_looked_up(self):
        assert _catalog().lookup(ReferenceKind.LINK, "src/User.php") == []

    def test_unqualified_type_not_duplicated(self):
        catalog = SymbolCatalog([CodeElement("Global", ElementKind.CLASS, "g.php", 1)])
        assert len(catalog.lookup(ReferenceKind.CLASS, "Global")) == 1

    def test_qualified_name_key(self):
        matches = _catalog().by_qualified_name("App\\Order::save")
        assert [(m.file, m.line) for m in matches] == [("src/Order.php", 12)]

    def test_elements_in_file(self):
        catalog = _catalog()
        assert [e.name for e in catalog.elements_in_file("src/User.php")] == ["User", "save"]
        assert catalog.elements_in_file("src/none.php") == []
        assert len(catalog) == 7

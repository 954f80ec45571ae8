import pytest

from conftest import convert, decl, intrinsic, ref, sig, source_file
from docgraph.core.errors import ErrorCode, ResolverError
from docgraph.frontend.nodes import NodeKind
from docgraph.models.kinds import ReflectionKind
from docgraph.resolver.resolver import resolve_project


def _resolved(*files):
    return convert(*files).project


def _method(owner: str, name: str, doc=None, static=False):
    separator = "." if static else "#"
    return decl(
        NodeKind.METHOD,
        name,
        f"{owner}{separator}{name}",
        doc=doc,
        modifiers={"static"} if static else (),
        signature=sig(returns=intrinsic("void")),
    )


def _hierarchy_levels(links):
    return [(level.is_target, [t.name for t in level.types]) for level in links.type_hierarchy]


class TestReverseEdges:
    def test_forward_reference_is_resolved_and_reversed(self):
        result = _resolved(
            source_file(
                "zoo.ts",
                decl(NodeKind.CLASS, "Dog", extends=[ref("Animal")]),
                decl(NodeKind.CLASS, "Animal"),
            )
        )
        dog = result.find_by_name("Dog")
        animal = result.find_by_name("Animal")
        assert dog.extended_types[0].target_id == animal.id
        assert [r.target_id for r in result.links_for(animal).extended_by] == [dog.id]
        assert result.links_for(dog).extended_by == []

    def test_reverse_edges_are_symmetric(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.INTERFACE, "Named"),
                decl(NodeKind.INTERFACE, "Aged"),
                decl(NodeKind.INTERFACE, "Person", extends=[ref("Named"), ref("Aged")]),
                decl(NodeKind.CLASS, "Base", implements=[ref("Named")]),
                decl(NodeKind.CLASS, "Employee", extends=[ref("Base")], implements=[ref("Person")]),
            )
        )
        project = result.project
        for declaration in result.declarations():
            for attribute, reverse in (("extended_types", "extended_by"), ("implemented_types", "implemented_by")):
                for item in getattr(declaration, attribute):
                    target = project.get(item.target_id)
                    assert declaration.id in [r.target_id for r in getattr(result.links_for(target), reverse)]
            links = result.links_for(declaration)
            for item in links.extended_by:
                source = project.get(item.target_id)
                assert declaration.id in [t.target_id for t in source.extended_types]
            for item in links.implemented_by:
                source = project.get(item.target_id)
                assert declaration.id in [t.target_id for t in source.implemented_types]

    def test_unresolved_references_stay_unresolved(self):
        converted = convert(
            source_file("a.ts", decl(NodeKind.VARIABLE, "x", type=ref("Missing", "lib.Missing"))),
        )
        result = converted.project
        x = result.find_by_name("x")
        assert not x.type.is_resolved
        assert result.unresolved == [x.type]
        (diagnostic,) = converted.diagnostics
        assert diagnostic.code == ErrorCode.UNRESOLVED_REFERENCE
        assert diagnostic.details == {"symbol": "lib.Missing", "owner": x.id}
        assert result.diagnostics == [diagnostic]


class TestTypeHierarchy:
    def _chain(self):
        return _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.CLASS, "C", extends=[ref("B")]),
                decl(NodeKind.CLASS, "B", extends=[ref("A")]),
                decl(NodeKind.CLASS, "A"),
            )
        )

    def test_middle_of_a_chain(self):
        result = self._chain()
        b = result.find_by_name("B")
        assert _hierarchy_levels(result.links_for(b)) == [
            (False, ["A"]),
            (True, ["B"]),
            (False, ["C"]),
        ]

    def test_exactly_one_target_layer_and_it_is_the_declaration(self):
        result = self._chain()
        for name in ("A", "B", "C"):
            declaration = result.find_by_name(name)
            levels = list(result.links_for(declaration).type_hierarchy)
            targets = [level for level in levels if level.is_target]
            assert len(targets) == 1
            assert [t.target_id for t in targets[0].types] == [declaration.id]

    def test_root_has_only_target_and_subclasses(self):
        result = self._chain()
        a = result.find_by_name("A")
        assert _hierarchy_levels(result.links_for(a)) == [(True, ["A"]), (False, ["B"])]

    def test_declaration_without_relatives_has_no_hierarchy(self):
        result = _resolved(source_file("a.ts", decl(NodeKind.CLASS, "Alone")))
        assert result.links_for(result.find_by_name("Alone")).type_hierarchy is None

    def test_inheritance_cycle_terminates(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.INTERFACE, "X", extends=[ref("Y")], children=[_method("X", "m")]),
                decl(NodeKind.INTERFACE, "Y", extends=[ref("X")], children=[_method("Y", "m")]),
            )
        )
        x = result.find_by_name("X")
        levels = list(result.links_for(x).type_hierarchy)
        assert sum(1 for level in levels if level.is_target) == 1


class TestMemberLinks:
    def test_overwrites_nearest_ancestor_member(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.CLASS, "Base", children=[_method("Base", "speak"), _method("Base", "create", static=True)]),
                decl(
                    NodeKind.CLASS,
                    "Derived",
                    extends=[ref("Base")],
                    children=[_method("Derived", "speak"), _method("Derived", "create")],
                ),
            )
        )
        base_speak = result.find_by_name("Base.speak")
        links = result.links_for(result.find_by_name("Derived.speak"))
        assert links.overwrites.target_id == base_speak.id
        assert links.overwrites.name == "Base.speak"
        # instance member does not overwrite a static one
        assert result.links_for(result.find_by_name("Derived.create")).overwrites is None

    def test_inherited_from_uses_the_origin_symbol(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.CLASS, "Base", children=[_method("Base", "greet", doc="/** Says hello. */")]),
                decl(
                    NodeKind.CLASS,
                    "Derived",
                    extends=[ref("Base")],
                    children=[
                        decl(
                            NodeKind.METHOD,
                            "greet",
                            "Derived#greet",
                            origin_symbol="Base#greet",
                            signature=sig(returns=intrinsic("void")),
                        )
                    ],
                ),
            )
        )
        greet = result.find_by_name("Derived.greet")
        links = result.links_for(greet)
        assert links.inherited_from.target_id == result.find_by_name("Base.greet").id
        assert links.overwrites is None
        assert greet.comment.summary == "Says hello."

    def test_implementation_of_includes_interfaces_of_ancestors(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.INTERFACE, "Shape", children=[_method("Shape", "area", doc="/** Area in square units. */")]),
                decl(NodeKind.CLASS, "Base", implements=[ref("Shape")], children=[_method("Base", "area")]),
                decl(NodeKind.CLASS, "Square", extends=[ref("Base")], children=[_method("Square", "area")]),
            )
        )
        shape_area = result.find_by_name("Shape.area")
        square_links = result.links_for(result.find_by_name("Square.area"))
        assert square_links.implementation_of.target_id == shape_area.id
        assert square_links.overwrites.target_id == result.find_by_name("Base.area").id
        assert result.links_for(result.find_by_name("Base.area")).implementation_of.target_id == shape_area.id

    def test_interfaces_extended_by_implemented_interfaces_count(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.INTERFACE, "Named", children=[_method("Named", "name")]),
                decl(NodeKind.INTERFACE, "Person", extends=[ref("Named")]),
                decl(NodeKind.CLASS, "Employee", implements=[ref("Person")], children=[_method("Employee", "name")]),
            )
        )
        links = result.links_for(result.find_by_name("Employee.name"))
        assert links.implementation_of.target_id == result.find_by_name("Named.name").id


class TestCommentInheritance:
    def test_undocumented_member_copies_the_implemented_comment(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.INTERFACE, "Shape", children=[_method("Shape", "area", doc="/** Area in square units. */")]),
                decl(NodeKind.CLASS, "Square", implements=[ref("Shape")], children=[_method("Square", "area")]),
            )
        )
        project = result.project
        area = result.find_by_name("Square.area")
        assert area.comment.summary == "Area in square units."
        signature = project.get(area.signatures[0])
        assert signature.comment.summary == "Area in square units."
        # the copy is a new object
        assert area.comment is not result.find_by_name("Shape.area").comment

    def test_chains_resolve_regardless_of_declaration_order(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.CLASS, "C", extends=[ref("B")], children=[_method("C", "run")]),
                decl(NodeKind.CLASS, "B", extends=[ref("A")], children=[_method("B", "run")]),
                decl(NodeKind.CLASS, "A", children=[_method("A", "run", doc="/** Runs the job. */")]),
            )
        )
        assert result.find_by_name("C.run").comment.summary == "Runs the job."
        assert result.find_by_name("B.run").comment.summary == "Runs the job."

    def test_documented_member_keeps_its_own_comment(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.CLASS, "A", children=[_method("A", "run", doc="/** Base. */")]),
                decl(NodeKind.CLASS, "B", extends=[ref("A")], children=[_method("B", "run", doc="/** Own. */")]),
            )
        )
        assert result.find_by_name("B.run").comment.summary == "Own."

    def test_explicit_inherit_doc_target(self):
        doc = "/**\n * @inheritDoc Util.format\n * @since 2.0\n */"
        result = _resolved(
            source_file(
                "a.ts",
                decl(
                    NodeKind.NAMESPACE,
                    "Util",
                    children=[
                        decl(
                            NodeKind.FUNCTION,
                            "format",
                            "Util.format",
                            doc="/**\n * Formats a value.\n * @returns the text\n */",
                            signature=sig(returns=intrinsic("string")),
                        )
                    ],
                ),
                decl(NodeKind.FUNCTION, "fmt", doc=doc, signature=sig(returns=intrinsic("string"))),
            )
        )
        project = result.project
        fmt = result.find_by_name("fmt")
        assert fmt.comment.summary == "Formats a value."
        assert not fmt.comment.has_tag("inheritdoc")
        assert fmt.comment.has_tag("returns")
        assert fmt.comment.get_tag("since").text == "2.0"
        signature = project.get(fmt.signatures[0])
        assert signature.comment.summary == "Formats a value."

    def test_inline_inherit_doc_falls_back_to_the_base_member(self):
        result = _resolved(
            source_file(
                "a.ts",
                decl(NodeKind.CLASS, "A", children=[_method("A", "run", doc="/** Base docs. */")]),
                decl(
                    NodeKind.CLASS,
                    "B",
                    extends=[ref("A")],
                    children=[_method("B", "run", doc="/** {@inheritDoc} */")],
                ),
            )
        )
        assert result.find_by_name("B.run").comment.summary == "Base docs."


def test_second_resolution_is_rejected():
    result = _resolved(source_file("a.ts", decl(NodeKind.CLASS, "A")))
    with pytest.raises(ResolverError) as excinfo:
        resolve_project(result.project)
    assert excinfo.value.code == ErrorCode.ALREADY_RESOLVED


def test_links_for_unlinked_declaration_is_empty():
    result = _resolved(source_file("a.ts", decl(NodeKind.VARIABLE, "x")))
    links = result.links_for(result.find_by_name("x"))
    assert links.is_empty()
    assert result.find_by_name("x").kind == ReflectionKind.Variable

import pytest

from docgraph.models import DeclarationReflection, IdentityRegistry, ProjectReflection, ReflectionKind


def _declaration(name: str) -> DeclarationReflection:
    return DeclarationReflection(name=name, kind=ReflectionKind.Class)


class TestIdentityRegistry:
    def test_ids_are_dense_from_base(self):
        registry = IdentityRegistry(base=10)
        first, second = _declaration("A"), _declaration("B")
        assert registry.allocate(first) == 10
        assert registry.allocate(second) == 11
        assert [r.name for r in registry] == ["A", "B"]
        assert 11 in registry
        assert len(registry) == 2

    def test_allocating_twice_is_an_error(self):
        registry = IdentityRegistry()
        reflection = _declaration("A")
        registry.allocate(reflection)
        with pytest.raises(ValueError):
            registry.allocate(reflection)

    def test_symbols_map_to_allocated_reflections(self):
        registry = IdentityRegistry()
        reflection = _declaration("A")
        with pytest.raises(ValueError):
            registry.register_symbol("A", reflection)
        registry.allocate(reflection)
        registry.register_symbol("A", reflection)
        assert registry.lookup_symbol("A") is reflection
        assert registry.lookup_symbol("B") is None
        assert registry.lookup_symbol(None) is None
        assert dict(registry.symbols) == {"A": reflection.id}

    def test_views_are_read_only(self):
        registry = IdentityRegistry()
        registry.allocate(_declaration("A"))
        with pytest.raises(TypeError):
            registry.reflections[5] = _declaration("B")  # type: ignore[index]


class TestProjectLookups:
    def test_project_takes_id_zero(self):
        project = ProjectReflection.create("Docs")
        assert project.id == 0
        assert project.get(0) is project
        assert project.get(None) is None
        assert dict(project.symbol_mapping) == {}
        assert dict(project.reflections) == {0: project}

    def test_nested_lookup_by_dotted_name(self):
        project = ProjectReflection.create()
        outer = DeclarationReflection(name="Outer", kind=ReflectionKind.Namespace)
        inner = DeclarationReflection(name="Inner", kind=ReflectionKind.Class)
        project.add(outer)
        project.add(inner)
        project.add_child(outer)
        outer.add_child(inner)
        assert project.find_by_name("Outer.Inner") is inner
        assert project.find_by_name(["Outer", "Inner"]) is inner
        assert project.find_by_name("Outer.Missing") is None
        assert inner.get_full_name(project) == "Outer.Inner"
        assert inner.find_reflection_by_name(project, "Outer") is outer

    def test_remove_child_clears_the_parent_link(self):
        project = ProjectReflection.create()
        child = _declaration("A")
        project.add(child)
        project.add_child(child)
        project.remove_child(child)
        assert child.parent_id is None
        assert project.find_by_name("A") is None
        assert project.children == []


@pytest.mark.parametrize(
    "mask, members",
    [
        (ReflectionKind.ClassOrInterface, {ReflectionKind.Class, ReflectionKind.Interface}),
        (ReflectionKind.SomeModule, {ReflectionKind.Module, ReflectionKind.Namespace}),
        (ReflectionKind.FunctionOrMethod, {ReflectionKind.Function, ReflectionKind.Method}),
        (ReflectionKind.VariableOrProperty, {ReflectionKind.Variable, ReflectionKind.Property}),
        (
            ReflectionKind.SomeSignature,
            {
                ReflectionKind.CallSignature,
                ReflectionKind.IndexSignature,
                ReflectionKind.ConstructorSignature,
                ReflectionKind.GetSignature,
                ReflectionKind.SetSignature,
            },
        ),
    ],
)
def test_group_masks_cover_exactly_their_kinds(mask, members):
    singles = [kind for kind in ReflectionKind if kind.value and kind.value & (kind.value - 1) == 0]
    assert {kind for kind in singles if kind & mask} == members

from pathlib import Path
from textwrap import dedent

import pytest

from ifacemaker.errors import (
    FormatError,
    ImportAliasConflictError,
    ImportAliasInUseError,
    MakerStateError,
    ParseError,
)
from ifacemaker.formatter import PassthroughFormatter
from ifacemaker.maker import Maker, Phase
from ifacemaker.models import ImportedPackage, MakerOptions


def make(*files, formatter=None, **kwargs) -> Maker:
    options = MakerOptions(struct_name="Foo", iface_name="FooIface", pkg_name="bar2", **kwargs)
    maker = Maker(options, formatter=formatter)
    for name, src in files:
        maker.parse_source(dedent(src).encode(), name)
    return maker


FOO = (
    "foo.go",
    """\
    package foo

    // Foo does things.
    type Foo struct{}

    // Get fetches an item.
    func (f *Foo) Get(id int) (string, error) { return "", nil }
    """,
)


def test_end_to_end_output():
    out = make(FOO).make_interface()

    assert out.decode() == dedent(
        """\
        // Code generated by ifacemaker. DO NOT EDIT.

        package bar2

        type FooIface interface {
        \t// Get fetches an item.
        \tGet(id int) (string, error)
        }
        """
    )


def test_only_exported_methods_of_the_target():
    maker = make(
        (
            "foo.go",
            """\
            package foo

            type Foo struct{}

            func (f *Foo) A() {}
            func (f Foo) B() int { return 0 }
            func (f *Foo) c() {}
            func (f Foo) d() {}
            func (o *Other) E() {}
            func F() {}
            """,
        )
    )

    assert [m.name for m in maker.methods] == ["A", "B"]
    assert [m.signature for m in maker.methods] == ["A()", "B() int"]


def test_order_follows_files_then_declarations():
    maker = make(
        ("a.go", "package foo\nfunc (f *Foo) Zeta() {}\nfunc (f *Foo) Alpha() {}\n"),
        ("b.go", "package foo\nfunc (f *Foo) Mid() {}\n"),
    )

    assert [m.name for m in maker.methods] == ["Zeta", "Alpha", "Mid"]
    assert [m.order for m in maker.methods] == [0, 1, 2]


def test_first_declaration_wins():
    maker = make(
        ("a.go", "package foo\nfunc (f *Foo) Get(id int) string { return \"\" }\n"),
        ("b.go", "package foo\nfunc (f *Foo) Get(id string) error { return nil }\n"),
    )

    assert [m.signature for m in maker.methods] == ["Get(id int) string"]
    assert maker.report()["stats"]["duplicates_dropped"] == 1


def test_reprocessing_a_file_does_not_duplicate():
    maker = make(FOO, FOO)

    assert [m.name for m in maker.methods] == ["Get"]


def test_conflicting_aliases_across_files():
    a = ("a.go", 'package foo\nimport q "x/y"\nfunc (f *Foo) A(v q.T) {}\n')
    b = ("b.go", 'package foo\nimport r "x/y"\nfunc (f *Foo) B(v r.T) {}\n')

    with pytest.raises(ImportAliasConflictError) as exc:
        make(a, b)

    assert exc.value.existing == "q"
    assert exc.value.alias == "r"
    assert "q, r" in str(exc.value)


def test_alias_reused_across_files():
    a = ("a.go", 'package foo\nimport q "x/y"\nfunc (f *Foo) A(v q.T) {}\n')
    b = ("b.go", 'package foo\nimport q "x/z"\nfunc (f *Foo) B(v q.T) {}\n')

    with pytest.raises(ImportAliasInUseError, match="Import alias q already in use"):
        make(a, b)


def test_files_without_methods_do_not_contribute_imports():
    a = ("a.go", 'package foo\nimport q "x/y"\nfunc (f *Foo) A(v q.T) {}\n')
    b = ("b.go", 'package foo\nimport r "x/y"\nfunc (o *Other) B(v r.T) {}\n')

    maker = make(a, b)

    assert maker.imports == (ImportedPackage("x/y", "q"),)


def test_blank_alias_reused_across_files():
    a = ("a.go", 'package foo\nimport _ "embed"\nfunc (f *Foo) A() {}\n')
    b = ("b.go", 'package foo\nimport _ "net/http/pprof"\nfunc (f *Foo) B() {}\n')

    with pytest.raises(ImportAliasInUseError, match="_"):
        make(a, b)


def test_dot_imports_are_silent():
    a = ("a.go", 'package foo\nimport . "x/y"\nfunc (f *Foo) A() {}\n')
    b = ("b.go", 'package foo\nimport q "x/y"\nfunc (f *Foo) B(v q.T) {}\n')
    c = ("c.go", 'package foo\nimport . "x/z"\nfunc (f *Foo) C() {}\n')

    maker = make(a, b, c)

    assert maker.imports == (ImportedPackage("x/y", "q"),)


def test_self_import_is_elided_and_qualifier_stripped(tmp_path):
    out_dir = tmp_path / "example.com" / "app" / "bar2"
    src = (
        "foo.go",
        """\
        package foo

        import pkg "example.com/app/bar2"

        func (f *Foo) Make(w pkg.Widget) *pkg.Widget { return nil }
        """,
    )

    maker = make(src, output_dir=out_dir)

    assert maker.imports == ()
    assert maker.source_alias == "pkg"
    assert [m.signature for m in maker.methods] == ["Make(w Widget) *Widget"]
    assert b"import" not in maker.make_interface()


def test_output_package_name_is_stripped_by_default():
    src = (
        "foo.go",
        'package foo\nimport "example.com/app/bar2"\nfunc (f *Foo) Use(w bar2.Widget) {}\n',
    )

    maker = make(src)

    assert [m.signature for m in maker.methods] == ["Use(w Widget)"]


def test_docs_are_dropped_when_disabled():
    maker = make(FOO, copy_docs=False)

    assert maker.methods[0].docs == ()
    assert b"//" not in maker.make_interface().split(b"\n", 1)[1]


def test_imports_used_by_signatures_are_kept():
    src = (
        "run.go",
        """\
        package foo

        import (
        	"context"
        	"io"
        	q "example.com/x/query"
        )

        func (f *Foo) Run(ctx context.Context, in q.Input) (*q.Output, error) { return nil, nil }
        """,
    )

    out = make(src).make_interface().decode()

    assert out == dedent(
        """\
        // Code generated by ifacemaker. DO NOT EDIT.

        package bar2

        import (
        \t"context"

        \tq "example.com/x/query"
        )

        type FooIface interface {
        \tRun(ctx context.Context, in q.Input) (*q.Output, error)
        }
        """
    )


def test_unformatted_render_keeps_registration_order():
    src = (
        "foo.go",
        'package foo\nimport (\n\tz "z/last"\n\t"a/first"\n)\nfunc (f *Foo) A(v z.T, w first.U) {}\n',
    )

    out = make(src, formatter=PassthroughFormatter()).make_interface().decode()

    assert out.index('z "z/last"') < out.index(' "a/first"')


def test_same_input_gives_same_output():
    assert make(FOO).make_interface() == make(FOO).make_interface()


def test_render_only_once():
    maker = make(FOO)
    maker.make_interface()

    assert maker.phase is Phase.RENDERED
    with pytest.raises(MakerStateError):
        maker.make_interface()
    with pytest.raises(MakerStateError):
        maker.parse_source(b"package foo\n", "late.go")


def test_empty_maker_renders_empty_interface():
    maker = make()

    assert maker.phase is Phase.EMPTY
    assert maker.make_interface().decode().endswith("type FooIface interface {\n}\n")


def test_parse_error_aborts():
    with pytest.raises(ParseError):
        make(("bad.go", "package foo\nfunc (f *Foo) Get( {\n"))


def test_format_failure_carries_unformatted_text():
    class Broken:
        def format(self, source):
            raise FormatError(source, "boom")

    with pytest.raises(FormatError) as exc:
        make(FOO, formatter=Broken()).make_interface()

    assert "Get(id int) (string, error)" in exc.value.unformatted


def test_report_lists_files_and_methods():
    report = make(FOO, ("other.go", "package foo\n")).report()

    assert report["stats"]["files_processed"] == 2
    assert report["stats"]["files_contributing"] == 1
    assert report["files"][0] == {"name": "foo.go", "package": "foo", "methods": ["Get"]}
    assert report["methods"][0]["docs"] == ["// Get fetches an item."]

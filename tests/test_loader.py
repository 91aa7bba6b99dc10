import pytest
from shaderdeck import (
    IncludeResolver, MemoryFetcher, ShaderPipeline, ShaderFetchError, MalformedAnnotationError,
    strip_version, find_included_names, load_shader_map, load_shaders
)

def test_strip_version_removes_leading_pragma():
    assert strip_version("#version 330 core\nvoid main() {}\n") == "void main() {}\n"

def test_strip_version_without_pragma_is_noop():
    text = "in vec2 uv;\nvoid main() {}\n"
    assert strip_version(text) == text

def test_strip_version_only_removes_first_match():
    text = "#version 330 core\nfloat a;\n#version 300 es\nfloat b;\n"
    assert strip_version(text) == "float a;\n#version 300 es\nfloat b;\n"

def test_strip_version_not_on_first_line():
    assert strip_version("// header\n#version 330 core\nfloat a;\n") == "// header\nfloat a;\n"

def test_strip_version_last_line_without_newline():
    assert strip_version("float a;\n#version 330 core") == "float a;\n"

def test_find_included_names_deduplicates_in_order():
    text = "#include <b.glsl>\n#include <a.glsl>\nx\n#include <b.glsl>\n"
    assert find_included_names(text) == ["b.glsl", "a.glsl"]

def test_resolve_without_includes_returns_input(run):
    fetcher = MemoryFetcher({})
    text = "uniform float a;\nvoid main() {}\n"
    assert run(IncludeResolver(fetcher).resolve(text)) == text
    assert fetcher.requests == []

def test_duplicate_include_fetched_once(run):
    fetcher = MemoryFetcher({"a.glsl": "float a;"})
    text = "#include <a.glsl>\nfloat x;\n#include <a.glsl>\n"
    result = run(IncludeResolver(fetcher).resolve(text))
    assert result == "float a;\nfloat x;\nfloat a;\n"
    assert fetcher.count("a.glsl") == 1

def test_include_directive_requires_exact_line(run):
    fetcher = MemoryFetcher({"a.glsl": "float a;"})
    text = "  #include <a.glsl>\n#include <a.glsl> // trailing\n"
    assert run(IncludeResolver(fetcher).resolve(text)) == text
    assert fetcher.requests == []

def test_nested_include_is_not_expanded(run):
    fetcher = MemoryFetcher({"a.glsl": "#include <b.glsl>\nfloat a;", "b.glsl": "float b;"})
    result = run(IncludeResolver(fetcher).resolve("#include <a.glsl>\n"))
    assert result == "#include <b.glsl>\nfloat a;\n"
    assert fetcher.count("b.glsl") == 0

def test_nested_include_also_named_by_outer_text_is_replaced(run):
    fetcher = MemoryFetcher({"a.glsl": "#include <b.glsl>\nfloat a;", "b.glsl": "float b;"})
    result = run(IncludeResolver(fetcher).resolve("#include <a.glsl>\n#include <b.glsl>\n"))
    assert result == "float b;\nfloat a;\nfloat b;\n"
    assert fetcher.count("b.glsl") == 1

def test_included_text_is_inserted_literally(run):
    content = r"float a = 1.0; // \1 \g<0> $1"
    fetcher = MemoryFetcher({"a.glsl": content})
    assert run(IncludeResolver(fetcher).resolve("#include <a.glsl>")) == content

def test_resolver_uses_existing_cache(run):
    fetcher = MemoryFetcher({})
    resolver = IncludeResolver(fetcher, cache={"a.glsl": "float cached;"})
    assert run(resolver.resolve("#include <a.glsl>")) == "float cached;"
    assert fetcher.requests == []

def test_missing_include_raises_fetch_error(run):
    fetcher = MemoryFetcher({})
    with pytest.raises(ShaderFetchError) as excinfo:
        run(IncludeResolver(fetcher).resolve("#include <missing.glsl>\n"))
    assert excinfo.value.path == "missing.glsl"

def test_pipeline_compiles_and_collects_parameters(run, fetcher):
    shaders, parameters = run(ShaderPipeline(fetcher).run({"vertex": "screen.vert", "fragment": "screen.frag"}))
    assert list(shaders) == ["vertex", "fragment"]
    assert "#version" not in shaders["vertex"]
    assert "#include" not in shaders["fragment"]
    assert "uniform vec3 tint;" in shaders["fragment"]
    assert list(parameters) == ["tint", "radius"]
    assert parameters["tint"].default == (1.0, 0.5, 0.0)

def test_pipeline_shares_include_cache_between_shaders(run):
    fetcher = MemoryFetcher({
        "a.frag": "#include <common.glsl>\nvoid a() {}\n",
        "b.frag": "#include <common.glsl>\nvoid b() {}\n",
        "common.glsl": "float common;",
    })
    shaders, _ = run(ShaderPipeline(fetcher).run({"a": "a.frag", "b": "b.frag"}))
    assert shaders["a"].startswith("float common;")
    assert shaders["b"].startswith("float common;")
    assert fetcher.count("common.glsl") == 1

def test_pipeline_cache_is_per_run(run):
    fetcher = MemoryFetcher({"a.frag": "#include <common.glsl>\n", "common.glsl": "float c;"})
    pipeline = ShaderPipeline(fetcher)
    run(pipeline.run({"a": "a.frag"}))
    run(pipeline.run({"a": "a.frag"}))
    assert fetcher.count("common.glsl") == 2

def test_pipeline_keeps_version_in_included_text(run):
    fetcher = MemoryFetcher({"a.frag": "#version 330 core\n#include <inc.glsl>\n", "inc.glsl": "#version 330 core\nfloat c;"})
    shaders, _ = run(ShaderPipeline(fetcher).run({"a": "a.frag"}))
    assert shaders["a"] == "#version 330 core\nfloat c;\n"

def test_pipeline_last_shader_wins_on_duplicate_parameter(run):
    fetcher = MemoryFetcher({
        "a.vert": "// Gain from vertex, default 1, 0 - 2\nuniform float gain;\n",
        "b.frag": "// Gain from fragment, default 3, 0 - 5\nuniform float gain;\n",
    })
    _, parameters = run(ShaderPipeline(fetcher).run({"vertex": "a.vert", "fragment": "b.frag"}))
    assert len(parameters) == 1
    assert parameters["gain"].help == "Gain from fragment"
    assert parameters["gain"].default == 3.0

def test_pipeline_missing_shader_aborts(run, fetcher):
    with pytest.raises(ShaderFetchError):
        run(ShaderPipeline(fetcher).run({"vertex": "screen.vert", "fragment": "nope.frag"}))

def test_pipeline_malformed_annotation_names_source(run):
    fetcher = MemoryFetcher({"bad.frag": "void f() {}\n// Broken, 0.5, 0 - 1\nuniform float broken;\n"})
    with pytest.raises(MalformedAnnotationError) as excinfo:
        run(ShaderPipeline(fetcher).run({"fragment": "bad.frag"}))
    assert excinfo.value.source == "bad.frag"
    assert excinfo.value.line == 2
    assert "bad.frag:2" in str(excinfo.value)

def test_load_shader_map_coroutine(run, fetcher):
    shaders, parameters = run(load_shader_map({"fragment": "screen.frag"}, fetcher))
    assert set(parameters) == {"tint", "radius"}

def test_load_shaders_sync(fetcher, capsys):
    shaders, parameters = load_shaders({"vertex": "screen.vert"}, fetcher=fetcher, verbose=True)
    assert "in vec2 in_vert;" in shaders["vertex"]
    assert parameters == {}
    assert "INFO: Loaded 1 shader(s)" in capsys.readouterr().out

def test_load_shaders_reports_failure(capsys):
    with pytest.raises(ShaderFetchError):
        load_shaders({"fragment": "missing.frag"}, fetcher=MemoryFetcher({}), verbose=True)
    assert "ERROR: Shader pipeline failed" in capsys.readouterr().err

import pytest


def test_imports():
    """
    Smoke test to ensure the public modules can be imported without error.
    This catches syntax errors, missing dependencies, or circular imports.
    """
    try:
        import tutormark
        from tutormark.markup import MarkupPipeline, clusterize, normalize, parse, segment
        from tutormark.markup.runner import main
        from tutormark.solution import format_solution, validate_solution
    except ImportError as e:
        pytest.fail(f"Failed to import core modules: {e}")


def test_end_to_end_render():
    """
    Raw model output goes through every stage and comes back as wrapped lines.
    """
    from tutormark.markup import MarkupPipeline
    from tutormark.markup.render import wrap_clusters

    pipeline = MarkupPipeline()
    rendered = pipeline.render("Answers:\na) \\(\\frac{1}{2}\\) of [blue:8 ×] {1/8}\nb) 12/5h")
    assert [b.label for b in rendered] == [None, "a)", "b)"]
    assert [wrap_clusters(b.clusters, 80) for b in rendered] == [
        ["Answers:"],
        ["1/2 of 8 × 1/8"],
        ["12/5h"],
    ]

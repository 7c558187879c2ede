from app.services.ingestion.structure import paginate_lines
from app.services.search.engine import MatchConfig, QueryEngine
from app.services.search.records import FileRecord
from app.services.search.store import DocumentStore


def make_record(filename: str, lines: list[str], with_pages: bool = True) -> FileRecord:
    return FileRecord(
        filename=filename,
        file_type="text/plain",
        content="\n".join(lines),
        lines=lines,
        pages=paginate_lines(lines, 25) if with_pages else [],
        file_url=f"/files/{filename}",
        file_id=f"id-{filename}",
    )


def engine_with(*records: FileRecord, config: MatchConfig | None = None) -> QueryEngine:
    store = DocumentStore()
    for r in records:
        store.upsert(r.filename, r)
    return QueryEngine(store, config)


def only_match(results):
    assert len(results) == 1
    assert len(results[0].matches) == 1
    return results[0].matches[0]


def test_empty_query_returns_nothing():
    engine = engine_with(make_record("a.txt", ["anything at all"]))
    assert engine.search("") == []
    assert engine.search("   \t ") == []


def test_phrase_exact_match():
    engine = engine_with(make_record("plan.txt", ["The project timeline starts in March"]))

    m = only_match(engine.search("project timeline"))
    assert m.match_type == "exact"
    assert m.exact_match is True
    assert m.line == 1
    assert m.page == 1
    assert m.snippet == "The project timeline starts in March"
    assert m.context == "The <mark>project timeline</mark> starts in March"


def test_phrase_with_missing_word_does_not_match():
    engine = engine_with(make_record("plan.txt", ["The project timeline starts in March"]))
    assert engine.search("project schedule") == []


def test_phrase_partial_match_above_ratio():
    engine = engine_with(make_record("minutes.txt", ["The quarterly budget meeting was moved"]))

    # 3 of 4 words present -> 0.75
    m = only_match(engine.search("quarterly budget review meeting"))
    assert m.match_type == "partial"
    assert m.exact_match is False
    assert m.context == (
        "The <mark>quarterly</mark> <mark>budget</mark> <mark>meeting</mark> was moved"
    )


def test_phrase_partial_below_ratio_is_dropped():
    engine = engine_with(make_record("minutes.txt", ["The quarterly budget was moved"]))
    # 2 of 3 words -> 0.67
    assert engine.search("quarterly budget review") == []


def test_phrase_ratio_is_configurable():
    engine = engine_with(
        make_record("plan.txt", ["The project timeline starts in March"]),
        config=MatchConfig(phrase_match_ratio=0.5),
    )
    m = only_match(engine.search("project schedule"))
    assert m.match_type == "partial"


def test_term_inside_word_is_partial_first_occurrence_wins():
    engine = engine_with(make_record("words.txt", ["concatenate cats"]))

    m = only_match(engine.search("cat"))
    assert m.match_type == "partial"
    assert m.exact_match is False
    assert m.context == "con<mark>cat</mark>enate <mark>cat</mark>s"


def test_term_with_word_boundaries_is_exact():
    engine = engine_with(make_record("pets.txt", ["Cat, dog and bird", "the cat sat"]))

    results = engine.search("CAT")
    assert len(results) == 1
    assert [m.match_type for m in results[0].matches] == ["exact", "exact"]
    assert results[0].matches[0].snippet == "Cat, dog and bird"
    assert results[0].exact_matches == 2


def test_fuzzy_match_on_typo():
    engine = engine_with(make_record("greet.txt", ["hello world"]))

    m = only_match(engine.search("wrold"))
    assert m.match_type == "fuzzy"
    assert m.exact_match is False
    assert m.context == "hello <mark>world</mark>"


def test_fuzzy_distance_is_configurable():
    engine = engine_with(
        make_record("greet.txt", ["hello world"]),
        config=MatchConfig(fuzzy_max_distance=1),
    )
    assert engine.search("wrold") == []


def test_fuzzy_does_not_match_distant_tokens():
    engine = engine_with(make_record("greet.txt", ["hello world"]))
    assert engine.search("zzzzz") == []


def test_phrase_queries_never_fuzzy_match():
    engine = engine_with(make_record("greet.txt", ["hello world"]))
    assert engine.search("helo wrold") == []


def test_matches_report_line_and_page():
    lines = [f"filler line {i}" for i in range(1, 31)]
    lines[26] = "the invoice is attached"
    engine = engine_with(make_record("long.txt", lines))

    m = only_match(engine.search("invoice"))
    assert m.line == 27
    assert m.page == 2


def test_missing_pages_default_to_page_one():
    lines = [f"filler line {i}" for i in range(1, 31)]
    lines[26] = "the invoice is attached"
    engine = engine_with(make_record("long.txt", lines, with_pages=False))

    m = only_match(engine.search("invoice"))
    assert m.line == 27
    assert m.page == 1


def test_matches_capped_per_file_and_counts_follow_cap():
    lines = [f"match number {i}" for i in range(30)]
    engine = engine_with(make_record("many.txt", lines))

    results = engine.search("match")
    assert len(results) == 1
    r = results[0]
    assert len(r.matches) == 20
    assert r.total_matches == 20
    assert r.exact_matches == 20
    assert [m.line for m in r.matches] == list(range(1, 21))


def test_ranking_exact_first_then_total():
    a = make_record("a.txt", ["report one", "report two", "report three"])
    b = make_record(
        "b.txt",
        ["report x", "reporting a", "reports b", "reported c", "subreport d", "reportage e"],
    )
    c = make_record("c.txt", ["reporting 1", "reporting 2", "reporting 3", "reporting 4"])
    d = make_record("d.txt", ["reporting 1", "reporting 2"])
    engine = engine_with(d, c, b, a)

    results = engine.search("report")
    assert [r.filename for r in results] == ["a.txt", "b.txt", "c.txt", "d.txt"]
    assert [(r.exact_matches, r.total_matches) for r in results] == [(3, 3), (1, 6), (0, 4), (0, 2)]


def test_ties_keep_store_order():
    first = make_record("first.txt", ["alpha"])
    second = make_record("second.txt", ["alpha"])

    assert [r.filename for r in engine_with(first, second).search("alpha")] == [
        "first.txt",
        "second.txt",
    ]
    assert [r.filename for r in engine_with(second, first).search("alpha")] == [
        "second.txt",
        "first.txt",
    ]


def test_files_without_matches_are_excluded():
    engine = engine_with(
        make_record("hit.txt", ["budget overview"]),
        make_record("miss.txt", ["nothing relevant here"]),
    )
    results = engine.search("budget")
    assert [r.filename for r in results] == ["hit.txt"]
    assert results[0].file_url == "/files/hit.txt"
    assert results[0].file_id == "id-hit.txt"


def test_long_line_context_is_clipped():
    line = "x" * 70 + " keyword " + "y" * 70
    engine = engine_with(make_record("wide.txt", [line]))

    m = only_match(engine.search("keyword"))
    assert m.context.startswith("...")
    assert m.context.endswith("...")
    assert "<mark>keyword</mark>" in m.context
    assert m.snippet == line

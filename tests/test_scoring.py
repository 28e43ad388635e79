from scoring import question_points, score, score_breakdown
from schemas.attempts import AnswerOut
from schemas.drills import DrillOut, QuestionOut


def make_drill(*questions):
    return DrillOut(
        id="d1",
        title="Drill",
        questions=[QuestionOut(id=qid, prompt="?", keywords=kws) for qid, kws in questions],
    )


def ans(qid, text):
    return AnswerOut(qid=qid, text=text)


CLOSURE = make_drill(("q1", ["closure", "scope"]))


def test_full_keyword_match_scores_100():
    assert score(CLOSURE, [ans("q1", "A closure captures scope.")]) == 100


def test_no_keyword_match_scores_0():
    assert score(CLOSURE, [ans("q1", "no idea")]) == 0


def test_unanswered_question_halves_score():
    drill = make_drill(("q1", ["closure", "scope"]), ("q2", ["hoisting"]))
    assert score(drill, [ans("q1", "closure and scope")]) == 50


def test_zero_question_drill_scores_0():
    assert score(make_drill(), [ans("q1", "anything")]) == 0


def test_empty_answers_score_0():
    assert score(CLOSURE, []) == 0


def test_unknown_qid_is_ignored():
    assert score(CLOSURE, [ans("nope", "closure scope")]) == 0
    assert score(CLOSURE, [ans("nope", "x"), ans("q1", "closure scope")]) == 100


def test_empty_keyword_list_contributes_nothing():
    drill = make_drill(("q1", []), ("q2", ["stack"]))
    assert question_points([], "whatever") == 0
    assert score(drill, [ans("q1", "whatever"), ans("q2", "call stack")]) == 50


def test_match_is_case_insensitive_substring():
    drill = make_drill(("q1", ["VAR", "Event Loop"]))
    assert score(drill, [ans("q1", "Variables live on the event loop")]) == 100


def test_partial_credit_rounds_half_up():
    # 1 of 4 keywords -> 2.5 points -> 3, so 3/10 -> 30
    drill = make_drill(("q1", ["a1", "b2", "c3", "d4"]))
    assert question_points(["a1", "b2", "c3", "d4"], "a1") == 3
    assert score(drill, [ans("q1", "a1")]) == 30


def test_final_percentage_rounds_half_up():
    # 1 of 8 questions fully answered: 12.5% -> 13
    drill = make_drill(*[(f"q{i}", ["kw"]) for i in range(8)])
    assert score(drill, [ans("q0", "kw")]) == 13


def test_last_answer_for_a_qid_wins():
    assert score(CLOSURE, [ans("q1", "closure scope"), ans("q1", "nothing")]) == 0
    assert score(CLOSURE, [ans("q1", "nothing"), ans("q1", "closure scope")]) == 100


def test_deterministic_bounded_and_inputs_untouched():
    drill = make_drill(("q1", ["x", "y", "z"]), ("q2", ["w"]))
    answers = [ans("q1", "x and z"), ans("q2", "W"), ans("q9", "extra")]
    before = [a.model_dump() for a in answers]

    results = {score(drill, answers) for _ in range(5)}
    assert len(results) == 1
    assert 0 <= results.pop() <= 100
    assert [a.model_dump() for a in answers] == before
    assert [q.keywords for q in drill.questions] == [["x", "y", "z"], ["w"]]


def test_breakdown_lists_every_question_in_drill_order():
    drill = make_drill(("q1", ["closure", "scope"]), ("q2", ["hoisting"]))
    rows = score_breakdown(drill, [ans("q1", "only scope here")])
    assert rows == [
        {"qid": "q1", "points": 5, "matched": ["scope"]},
        {"qid": "q2", "points": 0, "matched": []},
    ]

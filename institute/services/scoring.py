from institute.models import ExamResult, MockTest, TestResponse


def grade_test(test: MockTest, answers, time_taken=0):
    """Score ``answers`` (one selected option index or None per question).

    Returns ``(responses, score, accuracy, time_taken)``; accuracy is the
    share of attempted questions answered correctly.
    """
    answers = list(answers or [])
    responses = []
    score = 0
    correct = 0

    for i, question in enumerate(test.questions):
        selected = answers[i] if i < len(answers) else None
        is_correct = selected is not None and selected == question.correct_option
        marks = question.marks if is_correct else 0
        if is_correct:
            score += marks
            correct += 1
        responses.append(TestResponse(
            question_id=question.id,
            selected_option=selected,
            is_correct=is_correct,
            marks_awarded=marks,
        ))

    attempted = len([a for a in answers[:len(test.questions)] if a is not None])
    accuracy = round(correct / attempted * 100, 2) if attempted else 0

    max_seconds = test.duration * 60
    try:
        time_taken = int(time_taken)
    except (TypeError, ValueError):
        time_taken = 0
    time_taken = max(0, time_taken)
    if max_seconds:
        time_taken = min(time_taken, max_seconds)

    return responses, score, accuracy, time_taken


def parse_answers(form, question_count):
    """Read ``q0..qN`` option indexes from submitted form data."""
    answers = []
    for i in range(question_count):
        raw = form.get(f'q{i}')
        try:
            answers.append(int(raw) if raw not in (None, '') else None)
        except ValueError:
            answers.append(None)
    return answers


def rank_of(result_id, results):
    """1-based rank of ``result_id`` among results of the same test.

    Higher score ranks first; equal scores are split by less time taken.
    """
    ordered = sorted(
        (ExamResult.from_dict(r, r.get('id')) for r in results),
        key=lambda r: (-r.score, r.time_taken),
    )
    for position, result in enumerate(ordered, start=1):
        if result.id == result_id:
            return position
    return None

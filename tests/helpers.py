"""테스트 데이터 헬퍼"""
from datetime import datetime


def make_quiz_payload(course_id: int = 1, **overrides) -> dict:
    """문항 4개(배점 합계 5)짜리 퀴즈 생성 요청"""
    payload = {
        "course_id": course_id,
        "title": "React Basics Quiz",
        "description": "Check your understanding",
        "time_limit": 15,
        "passing_score": 3,
        "max_attempts": 2,
        "questions": [
            {
                "question": "Which hook manages local state?",
                "type": "multiple_choice",
                "options": ["useState", "useEffect", "useMemo"],
                "correct_answer": "useState",
                "points": 2,
                "explanation": "useState returns a state value and a setter.",
            },
            {
                "question": "JSX must be compiled before running in the browser.",
                "type": "true_false",
                "correct_answer": "true",
            },
            {
                "question": "What prop identifies list items?",
                "type": "short_answer",
                "correct_answer": "key",
            },
            {
                "question": "Explain the virtual DOM.",
                "type": "essay",
                "correct_answer": "A lightweight in-memory representation of the DOM",
            },
        ],
    }
    payload.update(overrides)
    return payload


def utc(year: int, month: int, day: int, hour: int = 12) -> datetime:
    """SQLite에 저장되는 형식과 같은 UTC 기준 naive 시각"""
    return datetime(year, month, day, hour)

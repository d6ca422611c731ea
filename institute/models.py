"""
Firestore document models using Python dataclasses.

Each model mirrors one document shape in the store and provides:
  - An `id` field for the Firestore document ID
  - A `from_dict(data, doc_id)` classmethod for deserialization
  - A `to_dict()` instance method where this code writes the document

Timestamps are kept as native datetime objects since Firestore returns
DatetimeWithNanoseconds (a datetime subclass).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _parse_datetime(value) -> Optional[datetime]:
    """Convert a value to datetime. Accepts datetime objects and ISO-format
    strings."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        value = value.replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            return None
    return None


def _number(value, default=0):
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


# ===========================================================================
# 1. Exam registration  (collection: examRegistrations, doc id = user uid)
# ===========================================================================

@dataclass
class ExamRegistration:
    id: Optional[str] = None
    registration_number: Optional[str] = None
    full_name: str = ""
    father_name: str = ""
    phone: str = ""
    email: str = ""
    dob: str = ""
    gender: str = ""
    course: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pin_code: str = ""
    is_read: bool = False
    onesignal_player_id: Optional[str] = None
    registered_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "registrationNumber": self.registration_number,
            "fullName": self.full_name,
            "fatherName": self.father_name,
            "phone": self.phone,
            "email": self.email,
            "dob": self.dob,
            "gender": self.gender,
            "course": self.course,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "pinCode": self.pin_code,
            "isRead": self.is_read,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> ExamRegistration:
        return cls(
            id=doc_id,
            registration_number=data.get("registrationNumber"),
            full_name=data.get("fullName", ""),
            father_name=data.get("fatherName", ""),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
            dob=data.get("dob", ""),
            gender=data.get("gender", ""),
            course=data.get("course", ""),
            address=data.get("address", ""),
            city=data.get("city", ""),
            state=data.get("state", ""),
            pin_code=data.get("pinCode", ""),
            is_read=data.get("isRead", False),
            onesignal_player_id=data.get("onesignal_player_id") or None,
            registered_at=_parse_datetime(data.get("registeredAt")),
        )


# ===========================================================================
# 2. Exam result  (collection: examResults)
# ===========================================================================

@dataclass
class TestResponse:
    question_id: str = ""
    selected_option: Optional[int] = None
    is_correct: bool = False
    marks_awarded: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedOption": self.selected_option,
            "isCorrect": self.is_correct,
            "marksAwarded": self.marks_awarded,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TestResponse:
        return cls(
            question_id=data.get("questionId", ""),
            selected_option=data.get("selectedOption"),
            is_correct=data.get("isCorrect", False),
            marks_awarded=_number(data.get("marksAwarded")),
        )


@dataclass
class ExamResult:
    id: Optional[str] = None
    user_id: Optional[str] = None
    registration_number: str = ""
    student_name: str = ""
    test_id: str = ""
    test_name: str = ""
    score: float = 0
    total_marks: float = 0
    accuracy: float = 0
    time_taken: int = 0
    responses: List[TestResponse] = field(default_factory=list)
    certificate_id: Optional[str] = None
    submitted_at: Optional[datetime] = None

    @property
    def percentage(self) -> float:
        """Score as a percentage of total marks, rounded to 2 decimals.

        A result with no (or a non-positive) total yields 0 rather than
        propagating a division error.
        """
        if self.total_marks <= 0:
            return 0
        return round(self.score / self.total_marks * 100, 2)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "registrationNumber": self.registration_number,
            "studentName": self.student_name,
            "testId": self.test_id,
            "testName": self.test_name,
            "score": self.score,
            "totalMarks": self.total_marks,
            "accuracy": self.accuracy,
            "timeTaken": self.time_taken,
            "responses": [r.to_dict() for r in self.responses],
        }
        if self.user_id:
            data["userId"] = self.user_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> ExamResult:
        return cls(
            id=doc_id,
            user_id=data.get("userId"),
            registration_number=data.get("registrationNumber", ""),
            student_name=data.get("studentName", ""),
            test_id=data.get("testId", ""),
            test_name=data.get("testName", ""),
            score=_number(data.get("score")),
            total_marks=_number(data.get("totalMarks")),
            accuracy=_number(data.get("accuracy")),
            time_taken=int(_number(data.get("timeTaken"))),
            responses=[TestResponse.from_dict(r) for r in data.get("responses") or []],
            certificate_id=data.get("certificateId") or None,
            submitted_at=_parse_datetime(data.get("submittedAt")),
        )


# ===========================================================================
# 3. Mock tests  (collections: testCategories, mockTests)
# ===========================================================================

@dataclass
class TestQuestion:
    id: str = ""
    question_text: str = ""
    options: List[str] = field(default_factory=list)
    correct_option: int = 0
    explanation: Optional[str] = None
    marks: float = 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TestQuestion:
        return cls(
            id=data.get("id", ""),
            question_text=data.get("questionText", ""),
            options=list(data.get("options") or []),
            correct_option=int(_number(data.get("correctOption"))),
            explanation=data.get("explanation"),
            marks=_number(data.get("marks"), 1) or 1,
        )


@dataclass
class MockTest:
    id: Optional[str] = None
    title: str = ""
    description: str = ""
    duration: int = 0
    total_marks: float = 0
    questions: List[TestQuestion] = field(default_factory=list)
    is_published: bool = False
    category_id: str = ""
    category_name: str = ""
    assigned_course: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> MockTest:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            description=data.get("description", ""),
            duration=int(_number(data.get("duration"))),
            total_marks=_number(data.get("totalMarks")),
            questions=[TestQuestion.from_dict(q) for q in data.get("questions") or []],
            is_published=data.get("isPublished", False),
            category_id=data.get("categoryId", ""),
            category_name=data.get("categoryName", ""),
            assigned_course=data.get("assignedCourse"),
        )


# ===========================================================================
# 4. Reviews  (collection: reviews)
# ===========================================================================

@dataclass
class Review:
    id: Optional[str] = None
    name: str = ""
    rating: int = 5
    comment: str = ""
    is_approved: bool = False
    submitted_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Review:
        return cls(
            id=doc_id,
            name=data.get("name", ""),
            rating=int(_number(data.get("rating"), 5)),
            comment=data.get("comment", ""),
            is_approved=data.get("isApproved", False),
            submitted_at=_parse_datetime(data.get("submittedAt")),
        )


# ===========================================================================
# 5. Learning modules  (learningModules -> chapters -> lessons)
# ===========================================================================

@dataclass
class Lesson:
    id: Optional[str] = None
    title: str = ""
    order: int = 0
    theory: str = ""
    example_code: Optional[str] = None
    practice_task: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "order": self.order,
            "theory": self.theory,
            "exampleCode": self.example_code,
            "practiceTask": self.practice_task,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Lesson:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            order=int(_number(data.get("order"))),
            theory=data.get("theory", ""),
            example_code=data.get("exampleCode"),
            practice_task=data.get("practiceTask"),
        )


@dataclass
class Chapter:
    id: Optional[str] = None
    title: str = ""
    order: int = 0
    lessons: List[Lesson] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "order": self.order}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Chapter:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            order=int(_number(data.get("order"))),
        )


@dataclass
class LearningModule:
    id: Optional[str] = None
    title: str = ""
    order: int = 0
    description: str = ""
    difficulty: str = "Beginner"
    icon: Optional[str] = None
    chapters: List[Chapter] = field(default_factory=list)

    @property
    def all_lessons(self) -> List[Lesson]:
        return [lesson for chapter in self.chapters for lesson in chapter.lessons]

    @property
    def total_lessons(self) -> int:
        return sum(len(chapter.lessons) for chapter in self.chapters)

    @property
    def first_lesson(self) -> Optional[Lesson]:
        lessons = self.all_lessons
        return lessons[0] if lessons else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "order": self.order,
            "description": self.description,
            "difficulty": self.difficulty,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> LearningModule:
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            order=int(_number(data.get("order"))),
            description=data.get("description", ""),
            difficulty=data.get("difficulty", "Beginner"),
            icon=data.get("icon"),
        )

    @classmethod
    def from_tree(cls, data: Dict[str, Any]) -> LearningModule:
        """Build a module from a nested dict with 'chapters' -> 'lessons'."""
        module = cls.from_dict(data, data.get("id"))
        for chapter_data in data.get("chapters") or []:
            chapter = Chapter.from_dict(chapter_data, chapter_data.get("id"))
            chapter.lessons = [
                Lesson.from_dict(lesson, lesson.get("id"))
                for lesson in chapter_data.get("lessons") or []
            ]
            module.chapters.append(chapter)
        return module

    def find_lesson(self, lesson_id: str):
        """Return (chapter, lesson, previous, next) for ``lesson_id``."""
        flat = [(chapter, lesson) for chapter in self.chapters for lesson in chapter.lessons]
        for i, (chapter, lesson) in enumerate(flat):
            if lesson.id == lesson_id:
                prev_lesson = flat[i - 1][1] if i > 0 else None
                next_lesson = flat[i + 1][1] if i < len(flat) - 1 else None
                return chapter, lesson, prev_lesson, next_lesson
        return None, None, None, None


# ===========================================================================
# 6. Progress  (collection: userProgress, doc id = user uid)
# ===========================================================================

@dataclass
class CourseProgress:
    completed_count: int = 0
    total_lessons: int = 0
    percentage: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completedCount": self.completed_count,
            "totalLessons": self.total_lessons,
            "percentage": self.percentage,
        }

"""커스텀 예외 클래스 정의"""


class BaseAppError(Exception):
    """애플리케이션 기본 예외 클래스"""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class AIServiceError(BaseAppError):
    """텍스트 생성 API 호출 실패 (503)

    호출한 쪽에서 항상 fallback 값으로 대체하며 사용자에게 노출하지 않는다.
    """

    def __init__(self, message: str = "AI 서비스를 사용할 수 없습니다"):
        super().__init__(message, status_code=503)


class QuizNotFoundError(BaseAppError):
    """퀴즈를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, quiz_id: int):
        super().__init__(f"퀴즈를 찾을 수 없습니다: {quiz_id}", status_code=404)


class QuestionNotFoundError(BaseAppError):
    """문항을 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, question_id: int):
        super().__init__(f"문항을 찾을 수 없습니다: {question_id}", status_code=404)


class CourseNotFoundError(BaseAppError):
    """강좌를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, course_id: int):
        super().__init__(f"강좌를 찾을 수 없습니다: {course_id}", status_code=404)


class UserNotFoundError(BaseAppError):
    """사용자를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, user_id: int):
        super().__init__(f"사용자를 찾을 수 없습니다: {user_id}", status_code=404)


class TagNotFoundError(BaseAppError):
    """태그를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, tag_id: int):
        super().__init__(f"태그를 찾을 수 없습니다: {tag_id}", status_code=404)


class SubmissionNotFoundError(BaseAppError):
    """제출 기록을 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, submission_id: int):
        super().__init__(f"제출 기록을 찾을 수 없습니다: {submission_id}", status_code=404)


class AttemptsExceededError(BaseAppError):
    """최대 응시 횟수를 초과했을 때 발생하는 예외 (400)"""

    def __init__(self, max_attempts: int):
        self.max_attempts = max_attempts
        super().__init__(f"최대 응시 횟수({max_attempts}회)를 초과했습니다", status_code=400)


class InvalidQuizRequestError(BaseAppError):
    """잘못된 퀴즈 요청일 때 발생하는 예외 (400)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class DuplicateTagError(BaseAppError):
    """이미 존재하는 태그 이름일 때 발생하는 예외 (409)"""

    def __init__(self, name: str):
        super().__init__(f"이미 존재하는 태그입니다: {name}", status_code=409)


class InvalidDateRangeError(BaseAppError):
    """조회 기간이 잘못되었을 때 발생하는 예외 (400)"""

    def __init__(self):
        super().__init__("start_date는 end_date보다 이전이어야 합니다", status_code=400)


class TrendRangeTooLargeError(BaseAppError):
    """추이 조회 기간이 기간 단위별 최대 버킷 수를 넘을 때 발생하는 예외 (400)"""

    def __init__(self, period: str, max_buckets: int):
        super().__init__(
            f"{period} 추이는 최대 {max_buckets}개 구간까지 조회할 수 있습니다. 기간을 줄여주세요",
            status_code=400,
        )

from __future__ import annotations

import sys
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import coursetrack` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from coursetrack.api.dependencies import get_enrollment_service  # noqa: E402
from coursetrack.main import app  # noqa: E402
from coursetrack.models.course import Course, Lesson  # noqa: E402
from coursetrack.repos.course_catalog import InMemoryCourseCatalog  # noqa: E402
from coursetrack.repos.unit_of_work import InMemoryStore, InMemoryUnitOfWork  # noqa: E402
from coursetrack.services import token_service  # noqa: E402
from coursetrack.services.clock import ManualClock  # noqa: E402
from coursetrack.services.enrollment_service import EnrollmentService  # noqa: E402


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def catalog(store: InMemoryStore) -> InMemoryCourseCatalog:
    """The store's course catalog; units of work read courses through it."""
    return store.courses


@pytest.fixture
def service(store: InMemoryStore, clock: ManualClock) -> EnrollmentService:
    return EnrollmentService(
        uow_factory=lambda: InMemoryUnitOfWork(store),
        clock=clock,
    )


@pytest.fixture(autouse=True)
def use_fresh_service(service: EnrollmentService):
    """Route the app to this test's in-memory service so state never bleeds."""
    app.dependency_overrides[get_enrollment_service] = lambda: service
    yield
    app.dependency_overrides.pop(get_enrollment_service, None)


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str | None = None,
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing. The subject defaults to a
    fresh account id."""
    return token_service.create_access_token(sub=username or str(uuid.uuid4()), roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token with default role (user)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(roles=["admin"])


# ---------------------------------------------------------------------------
# Course helpers
# ---------------------------------------------------------------------------


def add_test_course(
    catalog: InMemoryCourseCatalog, lessons: int = 2, slug: str = "test-course"
) -> tuple[Course, list[Lesson]]:
    """Register a course with `lessons` lessons in the catalog."""
    course = Course.new(slug=slug, title=slug.replace("-", " ").title())
    items = [
        Lesson.new(course_id=course.id, position=position, title=f"Lesson {position}")
        for position in range(1, lessons + 1)
    ]
    catalog.add_course(course, items)
    return course, items


@pytest.fixture
def course(catalog: InMemoryCourseCatalog) -> tuple[Course, list[Lesson]]:
    """A two-lesson course."""
    return add_test_course(catalog)

from .base import Base
from .user import UserModel
from .project import ProjectModel
from .project_member import ProjectMemberModel
from .project_invitation import ProjectInvitationModel
from .project_invite_code import ProjectInviteCodeModel
from .project_documentation import ProjectDocumentationModel
from .course import CourseQuizModel, CourseSummaryModel, CourseTopicModel

__all__ = [
    "Base",
    "UserModel",
    "ProjectModel",
    "ProjectMemberModel",
    "ProjectInvitationModel",
    "ProjectInviteCodeModel",
    "ProjectDocumentationModel",
    "CourseTopicModel",
    "CourseSummaryModel",
    "CourseQuizModel",
]

"""ORM模型；导入本包即在 Base.metadata 上注册所有表"""

from .user import User, UserRole
from .profile import Profile
from .subscription import UserSubscription, DemoVisitor
from .document import MedicalDocument, UserDiagnosis, MedicalTest
from .chat import ChatConversation, ChatMessage
from .blog import BlogPost, BlogComment
from .forum import ForumPost, ForumComment
from .testimonial import Testimonial
from .contact import ContactSubmission
from .article import DiseaseArticle, DiagnosisReference
from .analytics import AnalyticsEvent

__all__ = [
    "User",
    "UserRole",
    "Profile",
    "UserSubscription",
    "DemoVisitor",
    "MedicalDocument",
    "UserDiagnosis",
    "MedicalTest",
    "ChatConversation",
    "ChatMessage",
    "BlogPost",
    "BlogComment",
    "ForumPost",
    "ForumComment",
    "Testimonial",
    "ContactSubmission",
    "DiseaseArticle",
    "DiagnosisReference",
    "AnalyticsEvent",
]

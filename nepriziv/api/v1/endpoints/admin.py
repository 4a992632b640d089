"""
管理后台API接口模块

用户与角色、订阅、演示访客、联系表单、博客、论坛审核、评价、Расписание болезней、诊断目录、访问统计。
除论坛和博客评论审核（admin或moderator）外，全部需要admin角色。
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from nepriziv.api.dependencies import get_db, get_storage, require_roles
from nepriziv.infrastructure.response import error_response
from nepriziv.infrastructure.storage.object_storage import ObjectStorageInterface
from nepriziv.models.user import ROLE_ADMIN, ROLE_MODERATOR, User
from nepriziv.schemas.article import ArticleCreate, ArticleImportRequest, ArticleUpdate
from nepriziv.schemas.auth import AdminUsersAction, RoleRequest
from nepriziv.schemas.blog import BlogPostCreate, BlogPostUpdate
from nepriziv.schemas.contact import ContactStatusUpdate
from nepriziv.schemas.diagnosis import DiagnosisReferenceCreate, DiagnosisReferenceUpdate
from nepriziv.schemas.forum import ForumStatusUpdate
from nepriziv.schemas.subscription import SubscriptionAdminUpdate
from nepriziv.services.core.admin_service import admin_service
from nepriziv.services.core.analytics_service import analytics_service
from nepriziv.services.core.article_service import article_service
from nepriziv.services.core.blog_service import blog_service
from nepriziv.services.core.contact_service import contact_service
from nepriziv.services.core.diagnosis_catalog_service import diagnosis_catalog_service
from nepriziv.services.core.demo_service import demo_service
from nepriziv.services.core.forum_service import forum_service
from nepriziv.services.core.subscription_service import subscription_service
from nepriziv.services.core.testimonial_service import testimonial_service

logger = logging.getLogger(__name__)

router = APIRouter()

admin_required = require_roles(ROLE_ADMIN)
moderator_required = require_roles(ROLE_ADMIN, ROLE_MODERATOR)


# ---------- 用户与角色 ----------

@router.post("/users")
async def users_action(
        data: AdminUsersAction,  # {"action": "list"}
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    """
    用户管理动作

    Returns:
        dict: action=list 时 {"users": [{id, email, created_at}]}；其它action code=400
    """
    try:
        return await admin_service.users_action(db, data)
    except Exception as e:
        return error_response(msg=f"Ошибка получения пользователей: {str(e)}", code=500)


@router.get("/users")
async def list_users(admin: User = Depends(admin_required), db: Session = Depends(get_db)):
    try:
        return await admin_service.list_users(db)
    except Exception as e:
        return error_response(msg=f"Ошибка получения пользователей: {str(e)}", code=500)


@router.post("/users/{user_id}/roles")
async def add_role(
        user_id: str,
        data: RoleRequest,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await admin_service.add_role(db, user_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка назначения роли: {str(e)}", code=500)


@router.delete("/users/{user_id}/roles/{role}")
async def remove_role(
        user_id: str,
        role: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await admin_service.remove_role(db, admin, user_id, role)
    except Exception as e:
        return error_response(msg=f"Ошибка снятия роли: {str(e)}", code=500)


# ---------- 订阅与演示 ----------

@router.get("/subscriptions")
async def list_subscriptions(
        page: int = 1,
        limit: int = 100,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await subscription_service.list_subscriptions(db, max(page, 1), min(max(limit, 1), 500))
    except Exception as e:
        return error_response(msg=f"Ошибка получения подписок: {str(e)}", code=500)


@router.put("/subscriptions/{user_id}")
async def update_subscription(
        user_id: str,
        data: SubscriptionAdminUpdate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await subscription_service.admin_update(db, user_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка обновления подписки: {str(e)}", code=500)


@router.get("/demo-visitors")
async def list_demo_visitors(
        page: int = 1,
        limit: int = 100,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await demo_service.list_visitors(db, max(page, 1), min(max(limit, 1), 500))
    except Exception as e:
        return error_response(msg=f"Ошибка получения демо-посетителей: {str(e)}", code=500)


# ---------- 联系表单 ----------

@router.get("/contacts")
async def list_contacts(
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await contact_service.list_submissions(db, status, max(page, 1), min(max(limit, 1), 500))
    except Exception as e:
        return error_response(msg=f"Ошибка получения заявок: {str(e)}", code=500)


@router.put("/contacts/{submission_id}")
async def update_contact_status(
        submission_id: str,
        data: ContactStatusUpdate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await contact_service.update_status(db, submission_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка обновления заявки: {str(e)}", code=500)


@router.delete("/contacts/{submission_id}")
async def delete_contact(
        submission_id: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await contact_service.delete_submission(db, submission_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления заявки: {str(e)}", code=500)


# ---------- 博客 ----------

@router.get("/blog/posts")
async def list_blog_posts(admin: User = Depends(admin_required), db: Session = Depends(get_db)):
    try:
        return await blog_service.list_all_posts(db)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки постов: {str(e)}", code=500)


@router.post("/blog/posts")
async def create_blog_post(
        data: BlogPostCreate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await blog_service.create_post(db, admin, data)
    except Exception as e:
        return error_response(msg=f"Ошибка создания поста: {str(e)}", code=500)


@router.put("/blog/posts/{post_id}")
async def update_blog_post(
        post_id: str,
        data: BlogPostUpdate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await blog_service.update_post(db, post_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка обновления поста: {str(e)}", code=500)


@router.delete("/blog/posts/{post_id}")
async def delete_blog_post(
        post_id: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await blog_service.delete_post(db, post_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления поста: {str(e)}", code=500)


@router.post("/blog/images")
async def upload_blog_image(
        file: UploadFile = File(...),
        admin: User = Depends(admin_required),
        storage: ObjectStorageInterface = Depends(get_storage),
):
    try:
        data = await file.read()
        return await blog_service.upload_image(storage, data, file.filename or "image", file.content_type)
    except Exception as e:
        return error_response(msg=f"Не удалось загрузить изображение: {str(e)}", code=500)


@router.get("/blog/comments")
async def list_blog_comments(
        status: Optional[str] = None,
        moderator: User = Depends(moderator_required),
        db: Session = Depends(get_db),
):
    try:
        return await blog_service.list_all_comments(db, status)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки комментариев: {str(e)}", code=500)


@router.post("/blog/comments/{comment_id}/approve")
async def approve_blog_comment(
        comment_id: str,
        moderator: User = Depends(moderator_required),
        db: Session = Depends(get_db),
):
    try:
        return await blog_service.approve_comment(db, comment_id)
    except Exception as e:
        return error_response(msg=f"Ошибка одобрения комментария: {str(e)}", code=500)


@router.delete("/blog/comments/{comment_id}")
async def delete_blog_comment(
        comment_id: str,
        moderator: User = Depends(moderator_required),
        db: Session = Depends(get_db),
):
    try:
        return await blog_service.delete_comment(db, comment_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления комментария: {str(e)}", code=500)


# ---------- 论坛审核 ----------

@router.get("/forum/posts")
async def list_forum_posts(
        status: Optional[str] = None,
        moderator: User = Depends(moderator_required),
        db: Session = Depends(get_db),
):
    try:
        return await forum_service.list_all(db, status)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки форума: {str(e)}", code=500)


@router.put("/forum/posts/{post_id}/status")
async def set_forum_post_status(
        post_id: str,
        data: ForumStatusUpdate,
        moderator: User = Depends(moderator_required),
        db: Session = Depends(get_db),
):
    try:
        return await forum_service.set_status(db, post_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка модерации поста: {str(e)}", code=500)


@router.delete("/forum/posts/{post_id}")
async def delete_forum_post(
        post_id: str,
        moderator: User = Depends(moderator_required),
        db: Session = Depends(get_db),
):
    try:
        return await forum_service.delete_post(db, post_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления поста: {str(e)}", code=500)


# ---------- 评价 ----------

@router.get("/testimonials")
async def list_testimonials(
        status: Optional[str] = None,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await testimonial_service.list_all(db, status)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки отзывов: {str(e)}", code=500)


@router.post("/testimonials/{testimonial_id}/approve")
async def approve_testimonial(
        testimonial_id: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await testimonial_service.set_status(db, testimonial_id, "approved")
    except Exception as e:
        return error_response(msg=f"Ошибка одобрения отзыва: {str(e)}", code=500)


@router.post("/testimonials/{testimonial_id}/reject")
async def reject_testimonial(
        testimonial_id: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await testimonial_service.set_status(db, testimonial_id, "rejected")
    except Exception as e:
        return error_response(msg=f"Ошибка отклонения отзыва: {str(e)}", code=500)


@router.delete("/testimonials/{testimonial_id}")
async def delete_testimonial(
        testimonial_id: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await testimonial_service.delete(db, testimonial_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления отзыва: {str(e)}", code=500)


# ---------- Расписание болезней ----------

@router.get("/articles")
async def list_all_articles(admin: User = Depends(admin_required), db: Session = Depends(get_db)):
    try:
        return await article_service.list_all(db)
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки статей: {str(e)}", code=500)


@router.post("/articles/import")
async def import_articles(
        data: ArticleImportRequest,  # {"rawText": 整段文本}
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    """
    批量导入条目正文

    Returns:
        dict: {"success", "totalParsed", "updated", "notFoundInDb", "articleNumbers"}
    """
    try:
        return await article_service.import_articles(db, data)
    except Exception as e:
        return error_response(msg=f"Ошибка импорта статей: {str(e)}", code=500)


@router.post("/articles")
async def create_article(
        data: ArticleCreate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await article_service.create_article(db, data)
    except Exception as e:
        return error_response(msg=f"Ошибка создания статьи: {str(e)}", code=500)


@router.put("/articles/{article_id}")
async def update_article(
        article_id: str,
        data: ArticleUpdate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await article_service.update_article(db, article_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка обновления статьи: {str(e)}", code=500)


@router.delete("/articles/{article_id}")
async def deactivate_article(
        article_id: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await article_service.deactivate_article(db, article_id)
    except Exception as e:
        return error_response(msg=f"Ошибка отключения статьи: {str(e)}", code=500)


# ---------- 诊断目录 ----------

@router.post("/diagnosis-catalog")
async def create_catalog_diagnosis(
        data: DiagnosisReferenceCreate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await diagnosis_catalog_service.create_diagnosis(db, data)
    except Exception as e:
        return error_response(msg=f"Ошибка добавления диагноза: {str(e)}", code=500)


@router.put("/diagnosis-catalog/{diagnosis_id}")
async def update_catalog_diagnosis(
        diagnosis_id: str,
        data: DiagnosisReferenceUpdate,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await diagnosis_catalog_service.update_diagnosis(db, diagnosis_id, data)
    except Exception as e:
        return error_response(msg=f"Ошибка обновления диагноза: {str(e)}", code=500)


@router.delete("/diagnosis-catalog/{diagnosis_id}")
async def delete_catalog_diagnosis(
        diagnosis_id: str,
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await diagnosis_catalog_service.delete_diagnosis(db, diagnosis_id)
    except Exception as e:
        return error_response(msg=f"Ошибка удаления диагноза: {str(e)}", code=500)


# ---------- 访问统计 ----------

@router.get("/analytics")
async def get_analytics(
        limit: int = 100,  # 统计最近的多少条事件
        admin: User = Depends(admin_required),
        db: Session = Depends(get_db),
):
    try:
        return await analytics_service.get_summary(db, min(max(limit, 1), 5000))
    except Exception as e:
        return error_response(msg=f"Ошибка загрузки аналитики: {str(e)}", code=500)

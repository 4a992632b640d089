import logging
import sys

from nepriziv.db.base import SessionLocal, init_db


def promote_admin(email: str) -> bool:
    """给已注册用户授予admin角色，用户不存在时返回False"""
    from nepriziv.models.user import ROLE_ADMIN, User
    from nepriziv.services.core.admin_service import AdminService

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if user is None:
            return False
        AdminService.grant_role(db, user, ROLE_ADMIN)
        return True
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    logging.info("数据库表已创建")
    # python -m nepriziv.db.init_db admin@example.com
    if len(sys.argv) > 1:
        if promote_admin(sys.argv[1]):
            logging.info(f"{sys.argv[1]} 已设为管理员")
        else:
            logging.error(f"用户 {sys.argv[1]} 不存在")

from fastapi import APIRouter

from nepriziv.api.v1.endpoints import (
    admin,
    ai,
    analytics,
    articles,
    auth,
    blog,
    chat,
    contact,
    demo,
    diagnoses,
    diagnosis_catalog,
    documents,
    forum,
    generation,
    medical_tests,
    profile,
    subscription,
    testimonials,
)


api_router = APIRouter()

# 包含各模块的路由

api_router.include_router(auth.router, prefix="/auth", tags=["认证"])
api_router.include_router(profile.router, prefix="/profile", tags=["个人资料"])
api_router.include_router(subscription.router, prefix="/subscription", tags=["订阅"])
api_router.include_router(demo.router, prefix="/demo", tags=["演示模式"])
api_router.include_router(documents.router, prefix="/documents", tags=["医疗文件"])
api_router.include_router(ai.router, prefix="/ai", tags=["AI"])
api_router.include_router(chat.router, prefix="/chat", tags=["对话历史"])
api_router.include_router(diagnoses.router, prefix="/diagnoses", tags=["诊断"])
api_router.include_router(medical_tests.router, prefix="/medical-tests", tags=["化验记录"])
api_router.include_router(diagnosis_catalog.router, prefix="/diagnosis-catalog", tags=["诊断目录"])
api_router.include_router(generation.router, prefix="/generated-documents", tags=["文书生成"])
api_router.include_router(contact.router, prefix="/contact", tags=["联系表单"])
api_router.include_router(blog.router, prefix="/blog", tags=["博客"])
api_router.include_router(forum.router, prefix="/forum", tags=["论坛"])
api_router.include_router(testimonials.router, prefix="/testimonials", tags=["评价"])
api_router.include_router(articles.router, prefix="/articles", tags=["Расписание болезней"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["访问统计"])
api_router.include_router(admin.router, prefix="/admin", tags=["管理后台"])

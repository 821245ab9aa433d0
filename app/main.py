from fastapi import FastAPI

from app.logging_config import setup_logging

from app.routes.users.teacher.overview import router as teacher_overview_router
from app.routes.users.teacher.gradebook import router as teacher_gradebook_router
from app.routes.users.teacher.class_report import router as teacher_class_report_router

from app.routes.users.student.overview import router as student_overview_router
from app.routes.users.student.grades import router as student_grades_router


setup_logging()


app=FastAPI(
    title="STMS Reporting"
)

@app.get("/")
def root():
    return {
        "message":"STMS Reporting is Running!"
        }


app.include_router(teacher_overview_router)
app.include_router(teacher_gradebook_router)
app.include_router(teacher_class_report_router)

app.include_router(student_overview_router)
app.include_router(student_grades_router)

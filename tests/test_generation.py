"""
测试文书模板、DOCX/XLSX渲染和生成接口
"""
import io
from types import SimpleNamespace

import pytest
from docx import Document
from openpyxl import load_workbook

from nepriziv.models.profile import Profile
from nepriziv.services.generation.renderers import SHEET_TITLE, is_heading_line, render
from nepriziv.services.generation.templates import (
    DOC_TYPES,
    UnknownDocumentType,
    format_ru_date,
    render_document,
    requires_profile,
)


def make_profile(**overrides):
    values = dict(
        full_name="Иванов Иван Иванович",
        phone="+7 900 000-00-00",
        registration_address="г. Казань, ул. Баумана, 1",
        military_commissariat="Военный комиссариат г. Казани",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def make_diagnosis(name, documents=None, article=None):
    return SimpleNamespace(diagnosis_name=name, medical_documents=documents, user_article=article)


def test_format_ru_date():
    from datetime import date
    assert format_ru_date(date(2025, 1, 9)) == "09.01.2025"


def test_priobschenie_lists_diagnoses_and_profile():
    text = render_document(
        "priobschenie",
        make_profile(),
        [make_diagnosis("Гипертония", "выписка из ГКБ №7"), make_diagnosis("Плоскостопие")],
        today="01.02.2025",
    )
    assert text.startswith("В Военный комиссариат г. Казани")
    assert "1. Гипертония - выписка из ГКБ №7" in text
    assert "2. Плоскостопие" in text
    assert "Дата: 01.02.2025" in text


def test_missing_fields_use_placeholders():
    text = render_document("vypiska", make_profile(full_name=None, registration_address=""), [], today="01.02.2025")
    assert "[ФИО]" in text
    assert "[адрес]" in text


def test_empty_diagnosis_list_placeholder():
    text = render_document("priobschenie", make_profile(), [], today="01.02.2025")
    assert "1. [Список документов]" in text


@pytest.mark.parametrize("doc_type", ["obzhalovanie", "prokuratura", "isk_sud", "apellyaciya"])
def test_appeal_templates_render(doc_type):
    text = render_document(doc_type, make_profile(), [make_diagnosis("Астма", article="52")], today="01.02.2025")
    assert "Иванов Иван Иванович" in text


def test_questionnaire_types_use_custom_content():
    assert not requires_profile("questionnaire")
    assert render_document("questionnaire", custom_content="Ответы") == "Ответы"
    assert render_document("obsledovaniya") == "Нет данных для обследований"


def test_unknown_document_type():
    assert "unknown" not in DOC_TYPES
    with pytest.raises(UnknownDocumentType):
        render_document("unknown", make_profile())


def test_heading_detection():
    assert is_heading_line("ЗАЯВЛЕНИЕ")
    assert not is_heading_line("Заявление")
    assert not is_heading_line("   ")
    assert not is_heading_line("Дата: 01.02.2025")


def test_render_docx_headings_and_paragraphs():
    content, media_type = render("ЗАЯВЛЕНИЕ\nо приобщении документов", "docx")
    assert media_type.endswith("wordprocessingml.document")
    document = Document(io.BytesIO(content))
    heading = document.paragraphs[0]
    assert heading.text == "ЗАЯВЛЕНИЕ"
    assert heading.style.name == "Heading 2"
    assert document.paragraphs[1].text == "о приобщении документов"


def test_render_xlsx_one_line_per_row():
    content, media_type = render("первая\nвторая", "xlsx")
    assert media_type.endswith("spreadsheetml.sheet")
    sheet = load_workbook(io.BytesIO(content)).active
    assert sheet.title == SHEET_TITLE
    assert sheet["A1"].value == "первая"
    assert sheet["A2"].value == "вторая"


def test_render_unknown_format():
    with pytest.raises(KeyError):
        render("text", "pdf")


def test_generate_endpoint_returns_attachment(client, user_headers):
    client.put("/api/profile", json={"military_commissariat": "ВК Советского района"}, headers=user_headers)
    client.post("/api/diagnoses", json={"diagnosis_name": "Сколиоз"}, headers=user_headers)

    response = client.post(
        "/api/generated-documents",
        json={"docType": "priobschenie", "format": "docx"},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="priobschenie.docx"'
    text = "\n".join(p.text for p in Document(io.BytesIO(response.content)).paragraphs)
    assert "ВК Советского района" in text
    assert "1. Сколиоз" in text


def test_generate_endpoint_errors(client, user_headers, demo_headers):
    body = client.post("/api/generated-documents", json={"docType": "priobschenie", "format": "pdf"},
                       headers=user_headers).json()
    assert body["code"] == 400
    assert body["msg"] == "Неподдерживаемый формат"

    body = client.post("/api/generated-documents", json={"docType": "nope", "format": "docx"},
                       headers=user_headers).json()
    assert body["code"] == 400
    assert body["msg"] == "Неизвестный тип документа"

    body = client.post("/api/generated-documents", json={"docType": "questionnaire", "format": "docx"},
                       headers=demo_headers).json()
    assert body["code"] == 403


def test_unknown_type_checked_before_profile(client, db, user_headers):
    db.query(Profile).delete()
    db.commit()

    body = client.post("/api/generated-documents", json={"docType": "nope", "format": "docx"},
                       headers=user_headers).json()
    assert body["code"] == 400
    assert body["msg"] == "Неизвестный тип документа"

    missing = client.post("/api/generated-documents", json={"docType": "vypiska", "format": "docx"},
                          headers=user_headers).json()
    assert missing["code"] == 404
    assert missing["msg"] == "Не удалось загрузить данные профиля"

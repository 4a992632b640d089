"""
文书模板

每个模板都是 profile + diagnoses -> 纯文本，缺失字段用方括号占位。
profile 只需要有对应属性；None 表示没有资料（问卷类模板用不到）
"""

from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from nepriziv.db.base import get_msk_datetime

DOC_TYPES = (
    "priobschenie",
    "vypiska",
    "obzhalovanie",
    "prokuratura",
    "isk_sud",
    "apellyaciya",
    "obsledovaniya",
    "questionnaire",
)
# 不需要个人资料的类型
CUSTOM_CONTENT_TYPES = {
    "obsledovaniya": "Нет данных для обследований",
    "questionnaire": "Нет данных опросника",
}


class UnknownDocumentType(ValueError):
    pass


def format_ru_date(value: Optional[date] = None) -> str:
    value = value or get_msk_datetime().date()
    return value.strftime("%d.%m.%Y")


class _Fields:
    """profile.xxx 或占位符"""

    def __init__(self, profile: Any):
        self._profile = profile

    def __call__(self, field: str, placeholder: str) -> str:
        value = getattr(self._profile, field, None)
        return value if value else placeholder


def _header(f: _Fields) -> str:
    return (
        f"От: {f('full_name', '[ФИО]')}\n"
        f"{f('registration_address', '[Адрес регистрации]')}\n"
        f"Телефон: {f('phone', '[Телефон]')}"
    )


def _signature(f: _Fields, today: str) -> str:
    return f"Дата: {today}\nПодпись: _______________ {f('full_name', '[ФИО]')}"


def _diagnoses_with_documents(diagnoses: Sequence[Any]) -> str:
    lines = [
        f"{i}. {d.diagnosis_name}" + (f" - {d.medical_documents}" if d.medical_documents else "")
        for i, d in enumerate(diagnoses, start=1)
    ]
    return "\n".join(lines) or "1. [Список документов]"


def _diagnoses_with_articles(diagnoses: Sequence[Any]) -> str:
    lines = [
        f"{i}. {d.diagnosis_name}"
        + (f" (статья {d.user_article} Расписания болезней)" if d.user_article else "")
        for i, d in enumerate(diagnoses, start=1)
    ]
    return "\n".join(lines) or "[Список заболеваний]"


def priobschenie(profile: Any, diagnoses: Sequence[Any], today: str) -> str:
    f = _Fields(profile)
    return f"""В {f('military_commissariat', '[Название военкомата]')}
{f('military_commissariat_address', '[Адрес военкомата]')}

{_header(f)}

ЗАЯВЛЕНИЕ
о приобщении документов к делу призывника

Я, {f('full_name', '[ФИО]')}, {f('birth_date', '[дата рождения]')} года рождения,
зарегистрированный по адресу: {f('registration_address', '[адрес]')},
паспорт {f('passport_series', '[серия]')} {f('passport_number', '[номер]')},
выдан {f('passport_issued_by', '[кем выдан]')} {f('passport_issue_date', '[дата выдачи]')},

Прошу приобщить к моему личному делу призывника следующие медицинские документы:

{_diagnoses_with_documents(diagnoses)}

Данные документы подтверждают наличие у меня заболеваний, препятствующих прохождению военной службы.

{_signature(f, today)}"""


def vypiska(profile: Any, diagnoses: Sequence[Any], today: str) -> str:
    f = _Fields(profile)
    return f"""В {f('military_commissariat', '[Название военкомата]')}
{f('military_commissariat_address', '[Адрес военкомата]')}

{_header(f)}

ЗАЯВЛЕНИЕ
о получении выписки из протокола заседания призывной комиссии

Прошу выдать мне выписку из протокола заседания призывной комиссии от [дата заседания]
по результатам моего медицинского освидетельствования и определения категории годности к военной службе.

Выписка необходима для дальнейшего обжалования решения призывной комиссии.

Прошу направить выписку по адресу: {f('registration_address', '[адрес]')}
или выдать на руки при личном обращении.

{_signature(f, today)}"""


def obzhalovanie(profile: Any, diagnoses: Sequence[Any], today: str) -> str:
    f = _Fields(profile)
    commissariat = f('military_commissariat', '[военкомат]')
    return f"""В {f('superior_military_commissariat', '[Название вышестоящего военкомата]')}
{f('superior_military_commissariat_address', '[Адрес]')}

{_header(f)}

ЖАЛОБА
на решение призывной комиссии

Я, {f('full_name', '[ФИО]')}, {f('birth_date', '[дата рождения]')} года рождения,
не согласен с решением призывной комиссии {commissariat}
от [дата решения] о признании меня годным к военной службе.

Считаю данное решение незаконным и необоснованным по следующим основаниям:

1. При вынесении решения не были учтены следующие заболевания:
{_diagnoses_with_articles(diagnoses)}

2. Имеющиеся у меня заболевания подтверждаются медицинскими документами.

3. Призывная комиссия не провела необходимое дополнительное обследование.

На основании изложенного и руководствуясь статьей 28 Федерального закона "О воинской обязанности и военной службе",

ПРОШУ:
1. Отменить решение призывной комиссии {commissariat} от [дата].
2. Направить меня на дополнительное медицинское обследование.
3. Вынести новое решение с учетом всех имеющихся заболеваний.

Приложения:
1. Копии медицинских документов.
2. Выписка из протокола призывной комиссии.

{_signature(f, today)}"""


def prokuratura(profile: Any, diagnoses: Sequence[Any], today: str) -> str:
    f = _Fields(profile)
    return f"""В {f('prosecutor_office', '[Название прокуратуры]')}

{_header(f)}

ЖАЛОБА
на действия военного комиссариата

Я, {f('full_name', '[ФИО]')}, обращаюсь с жалобой на неправомерные действия
{f('military_commissariat', '[военкомат]')}.

[Описание ситуации и нарушений]

Считаю действия военного комиссариата нарушающими мои права, предусмотренные:
- Конституцией РФ
- Федеральным законом "О воинской обязанности и военной службе"
- Положением о военно-врачебной экспертизе

ПРОШУ:
1. Провести проверку действий военного комиссариата.
2. Принять меры к восстановлению моих нарушенных прав.
3. Привлечь виновных лиц к ответственности.

{_signature(f, today)}"""


def isk_sud(profile: Any, diagnoses: Sequence[Any], today: str) -> str:
    f = _Fields(profile)
    return f"""В {f('court_by_registration', '[Название суда]')}

Истец: {f('full_name', '[ФИО]')}
{f('registration_address', '[Адрес регистрации]')}

Ответчик: {f('military_commissariat', '[Название военкомата]')}
{f('military_commissariat_address', '[Адрес]')}

ИСКОВОЕ ЗАЯВЛЕНИЕ
об оспаривании решения призывной комиссии

Я, {f('full_name', '[ФИО]')}, {f('birth_date', '[дата рождения]')} года рождения,
проживающий по адресу: {f('registration_address', '[адрес]')},
паспорт {f('passport_series', '[серия]')} {f('passport_number', '[номер]')},

Решением призывной комиссии {f('military_commissariat', '[военкомат]')}
от [дата] я был признан годным к военной службе (категория годности [категория]).

Считаю данное решение незаконным и необоснованным, нарушающим мои права по следующим основаниям:

1. У меня имеются следующие заболевания:
{_diagnoses_with_articles(diagnoses)}

2. Согласно Расписанию болезней, утвержденному Постановлением Правительства РФ,
при данных заболеваниях я должен быть признан [категория годности].

3. Призывная комиссия не учла представленные медицинские документы.

На основании статей 254, 255 Гражданского процессуального кодекса РФ,

ПРОШУ СУД:
1. Признать незаконным решение призывной комиссии от [дата].
2. Обязать ответчика направить меня на дополнительное обследование.
3. Обязать ответчика вынести новое решение с учетом всех заболеваний.

Приложения:
1. Копии медицинских документов
2. Копия решения призывной комиссии
3. Квитанция об оплате госпошлины

{_signature(f, today)}"""


def apellyaciya(profile: Any, diagnoses: Sequence[Any], today: str) -> str:
    f = _Fields(profile)
    court = f('court_by_registration', '[Название суда]')
    return f"""В {court} (апелляционная инстанция)

От: {f('full_name', '[ФИО]')}
{f('registration_address', '[Адрес регистрации]')}

АПЕЛЛЯЦИОННАЯ ЖАЛОБА
на решение суда первой инстанции

Решением {f('court_by_registration', '[суд]')} от [дата] по делу № [номер]
по иску {f('full_name', '[ФИО]')} к {f('military_commissariat', '[военкомат]')}
об оспаривании решения призывной комиссии было [результат решения].

Считаю данное решение незаконным и необоснованным по следующим основаниям:

1. [Основание 1]
2. [Основание 2]
3. [Основание 3]

На основании статей 320, 321 Гражданского процессуального кодекса РФ,

ПРОШУ:
1. Отменить решение суда первой инстанции.
2. Принять новое решение, которым удовлетворить исковые требования.

Приложения:
1. Копия решения суда первой инстанции
2. Дополнительные доказательства

{_signature(f, today)}"""


PROFILE_TEMPLATES: Dict[str, Callable[[Any, Sequence[Any], str], str]] = {
    "priobschenie": priobschenie,
    "vypiska": vypiska,
    "obzhalovanie": obzhalovanie,
    "prokuratura": prokuratura,
    "isk_sud": isk_sud,
    "apellyaciya": apellyaciya,
}


def requires_profile(doc_type: str) -> bool:
    return doc_type not in CUSTOM_CONTENT_TYPES


def render_document(
    doc_type: str,
    profile: Any = None,
    diagnoses: Optional[List[Any]] = None,
    custom_content: Optional[str] = None,
    today: Optional[str] = None,
) -> str:
    """
    按类型生成文书文本

    参数:
        doc_type: 文书类型
        profile: 个人资料（问卷类可以为None）
        diagnoses: 诊断列表
        custom_content: 问卷类文书的正文
        today: dd.mm.yyyy，默认莫斯科当天
    """
    if doc_type in CUSTOM_CONTENT_TYPES:
        return custom_content or CUSTOM_CONTENT_TYPES[doc_type]
    template = PROFILE_TEMPLATES.get(doc_type)
    if template is None:
        raise UnknownDocumentType(doc_type)
    return template(profile, diagnoses or [], today or format_ru_date())

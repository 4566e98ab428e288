"""
In-memory stand-ins for the HTTP session and fixture pages used by the tests.
"""

import base64


SITE = "https://m3e-medical.com"
LOGIN_URL = f"{SITE}/users/sign_in"

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

LOGIN_PAGE = """
<html><body>
<form action="/users/sign_in" method="post">
  <input type="hidden" name="authenticity_token" value="tok-123">
  <input type="email" name="user[email]">
  <input type="password" name="user[password]">
</form>
</body></html>
"""


class FakeResponse:
    def __init__(self, status_code=200, text="", content=None, headers=None):
        self.status_code = status_code
        self.text = text
        self.content = content if content is not None else text.encode('utf-8')
        self.headers = headers or {}

    @property
    def ok(self):
        return self.status_code < 400


class FakeSession:
    """
    Answers GET/POST requests from a routing table.

    A route value may be a FakeResponse or an exception instance to raise.
    Unknown URLs answer 404.
    """

    def __init__(self, get_routes=None, post_routes=None):
        self.get_routes = dict(get_routes or {})
        self.post_routes = dict(post_routes or {})
        self.headers = {}
        self.requests = []
        self.closed = False

    def _answer(self, routes, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        answer = routes.get(url, FakeResponse(404, "not found"))
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get(self, url, **kwargs):
        return self._answer(self.get_routes, 'GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self._answer(self.post_routes, 'POST', url, **kwargs)

    def close(self):
        self.closed = True

    def urls(self, method='GET'):
        return [url for m, url, _ in self.requests if m == method]


def login_routes(post_status=302):
    """GET/POST routes for a login form answering ``post_status``."""
    headers = {'Location': f"{SITE}/users/home"} if post_status in (302, 303) else {}
    return (
        {LOGIN_URL: FakeResponse(200, LOGIN_PAGE)},
        {LOGIN_URL: FakeResponse(post_status, "", headers=headers)},
    )


def image_response():
    return FakeResponse(200, content=PNG_BYTES, headers={'content-type': 'image/png'})


def question_page(number, question, choices=("A 選択肢1", "B 選択肢2"), images=(),
                  next_href=None, explanation_html=None, explanation_images=(),
                  basic=None):
    """
    Build a question page in the site's layout.

    ``basic`` is an optional ``(title, paragraph_html, image_srcs)`` tuple.
    """
    image_tags = "".join(f'<img src="{src}">' for src in images)
    choice_tags = "".join(f"<li><button> {c} </button></li>" for c in choices)
    next_tag = f'<a class="o-btn is-grey is-triangle_g" href="{next_href}">スキップして次へ</a>' if next_href else ''

    expound = ''
    if explanation_html is not None:
        exp_images = "".join(f'<img src="{src}">' for src in explanation_images)
        basic_html = ''
        if basic is not None:
            title, paragraph, basic_images = basic
            gallery = "".join(f'<img src="{src}">' for src in basic_images)
            basic_html = f"""
      <div id="accordion_expound_base">
        <div class="marker_basic">
          <div class="d-issue__expound__box">
            <h3>{title}</h3>
            <p>{paragraph}</p>
            <div class="js-lightgallery">{gallery}</div>
          </div>
        </div>
      </div>"""
        expound = f"""
  <div class="d-issue__expound">
    <div class="d-issue__expound__accordion_content">
      {exp_images}
      <div id="question-explanation">{explanation_html}</div>
      {basic_html}
    </div>
  </div>"""

    return f"""<!DOCTYPE html>
<html><body>
  <div class="d-issue__content__num"><p>問題番号 : {number}</p></div>
  <div class="d-issue__content">
    <div id="question-body"><p>{question}</p></div>
    {image_tags}
  </div>
  <ul id="practice_question_choice">{choice_tags}</ul>
  <div class="is-submit">{next_tag}</div>
  {expound}
</body></html>"""


def explanation(analysis, answer, points):
    return (f"<b><u>選択肢考察</u></b>:{analysis}"
            f"<b><u>正解</u></b>:{answer}"
            f"<b><u>ポイント</u></b>{points}")

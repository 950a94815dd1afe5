import json
import logging

from flask import Flask, request, jsonify

from config import settings
from errors import ClipboardError, ValidationError
from gemini_service import GeminiPromptService
from prompt_parts import FIELDS
from runtime import LoopRunner
from session import Phase, PromptSession, SessionStore

logger = logging.getLogger(__name__)


def create_app(service, runner=None, max_sessions=None):
    """Build the Flask app around a prompt service.

    ``service`` provides ``generate_prompt_parts`` and ``translate``
    coroutines. Session work runs on ``runner``'s event loop.
    """
    app = Flask(__name__)
    runner = (runner or LoopRunner()).start()
    store = SessionStore(
        lambda: PromptSession(service, settings.COPY_FEEDBACK_SECONDS),
        max_sessions or settings.MAX_SESSIONS,
    )
    app.extensions["prompt_studio"] = {"runner": runner, "store": store}

    def get_session(session_id):
        session = store.get(session_id)
        if session is None:
            return None, (jsonify({"error": "Session not found"}), 404)
        return session, None

    def json_body():
        data = request.get_json(silent=True)
        if data is None:
            return {}, None
        if not isinstance(data, dict):
            return None, (jsonify({"error": "Request body must be a JSON object"}), 400)
        return data, None

    @app.route("/")
    def index():
        session_id = store.create()
        return HTML_PAGE.replace("/*__SESSION_ID__*/", json.dumps(session_id))

    @app.route("/api/sessions/<session_id>")
    def session_state(session_id):
        session, error = get_session(session_id)
        if error:
            return error
        return jsonify(runner.call(session.snapshot))

    @app.route("/api/sessions/<session_id>/generate", methods=["POST"])
    def generate(session_id):
        session, error = get_session(session_id)
        if error:
            return error

        data, error = json_body()
        if error:
            return error
        idea = data.get("idea", "")
        if not isinstance(idea, str):
            return jsonify({"error": "Idea must be a string"}), 400

        ok = runner.run(session.generate(idea))
        snapshot = runner.call(session.snapshot)
        if ok:
            return jsonify(snapshot)
        if snapshot["phase"] == Phase.GENERATION_FAILED.value:
            return jsonify(snapshot), 502
        return jsonify(snapshot), 400

    @app.route("/api/sessions/<session_id>/fields/<field>", methods=["PATCH"])
    def edit_field(session_id, field):
        session, error = get_session(session_id)
        if error:
            return error

        data, error = json_body()
        if error:
            return error
        value = data.get("value", "")
        if not isinstance(value, str):
            return jsonify({"error": "Field value must be a string"}), 400
        if field not in FIELDS:
            return jsonify({"error": f"Unknown prompt field: {field}"}), 400

        try:
            runner.call(session.edit_field, field, value)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 409
        return jsonify(runner.call(session.snapshot))

    @app.route("/api/sessions/<session_id>/copy", methods=["POST"])
    def copy(session_id):
        session, error = get_session(session_id)
        if error:
            return error

        data, error = json_body()
        if error:
            return error
        target = data.get("target", "")
        clipboard_error = None
        if not data.get("ok", False):
            clipboard_error = ClipboardError(data.get("reason") or "Clipboard write failed")

        try:
            runner.call(session.record_copy, target, clipboard_error)
        except ValidationError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify(runner.call(session.snapshot))

    return app


HTML_PAGE = r"""<!DOCTYPE html>
<html lang="id">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Prompt Generator Image</title>
<style>
  *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }

  body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: #0f0f0f;
    color: #e0e0e0;
    min-height: 100vh;
  }

  main {
    max-width: 1040px;
    margin: 0 auto;
    padding: 32px 24px 80px;
    display: flex;
    flex-direction: column;
    gap: 20px;
  }

  header { text-align: center; padding: 12px 0; }
  header h1 { font-size: 2rem; font-weight: 700; color: #fff; }
  header h1 span { color: #8b5cf6; }
  header p { color: #888; margin-top: 6px; }

  .card {
    background: #1a1a1a;
    border: 1px solid #2a2a2a;
    border-radius: 10px;
    padding: 20px;
  }
  .card.error {
    border-color: #ef4444;
    color: #fca5a5;
    background: #1a1111;
    text-align: center;
    font-weight: 600;
  }
  .hidden { display: none !important; }

  .controls { display: flex; gap: 12px; align-items: stretch; }

  textarea {
    width: 100%;
    background: #141414;
    color: #e0e0e0;
    border: 1px solid #2a2a2a;
    border-radius: 10px;
    padding: 12px 14px;
    font-size: 0.9rem;
    font-family: inherit;
    resize: none;
    outline: none;
    transition: border-color 0.2s;
    line-height: 1.5;
    overflow: hidden;
  }
  textarea:focus { border-color: #8b5cf6; }
  textarea::placeholder { color: #555; }

  button {
    background: #8b5cf6;
    color: #fff;
    border: none;
    border-radius: 8px;
    padding: 8px 20px;
    font-size: 0.82rem;
    font-weight: 500;
    cursor: pointer;
    white-space: nowrap;
    transition: background 0.2s, opacity 0.2s;
  }
  button:hover { background: #7c3aed; }
  button:disabled { opacity: 0.5; cursor: not-allowed; }

  .copy-btn {
    background: #232323;
    color: #aaa;
    font-size: 0.72rem;
    padding: 4px 12px;
    border-radius: 6px;
    border: 1px solid #333;
  }
  .copy-btn:hover { background: #2e2e2e; color: #e0e0e0; }

  .grid {
    display: grid;
    grid-template-columns: 1fr 1fr;
    gap: 16px 24px;
  }
  .column-header {
    display: flex;
    justify-content: space-between;
    align-items: center;
  }
  .column-header h2, .final-header h2 { font-size: 1.1rem; font-weight: 600; color: #fff; }

  label {
    display: block;
    font-size: 0.78rem;
    font-weight: 600;
    color: #888;
    text-transform: capitalize;
    margin-bottom: 4px;
  }

  .translated {
    background: #141414;
    border-radius: 10px;
    padding: 12px 14px;
    min-height: 4rem;
    white-space: pre-wrap;
    word-break: break-word;
    line-height: 1.5;
    font-size: 0.9rem;
  }
  .translated.pending { color: #666; }

  .final-header {
    display: flex;
    justify-content: space-between;
    align-items: center;
    margin-bottom: 10px;
  }
  pre {
    background: #141414;
    border-radius: 10px;
    padding: 14px;
    font-size: 0.82rem;
    white-space: pre-wrap;
    word-break: break-word;
    font-family: 'SF Mono', 'Fira Code', monospace;
  }

  .loading {
    display: flex;
    justify-content: center;
    align-items: center;
    gap: 10px;
    color: #888;
  }
  .spinner {
    width: 16px; height: 16px;
    border: 2px solid #333;
    border-top-color: #8b5cf6;
    border-radius: 50%;
    animation: spin 0.8s linear infinite;
  }
  @keyframes spin { to { transform: rotate(360deg); } }

  @media (max-width: 760px) {
    .grid { grid-template-columns: 1fr; }
    .controls { flex-direction: column; }
  }
</style>
</head>
<body>
<main>
  <header>
    <h1><span>&#9670;</span> Prompt Generator Image</h1>
    <p>Buat prompt gambar yang detail dan menakjubkan dengan mudah.</p>
  </header>

  <div class="card">
    <div class="controls">
      <textarea id="idea" rows="2" placeholder="Masukkan ide sederhana Anda di sini..."></textarea>
      <button id="generateBtn" onclick="generatePrompt()">Buat Prompt</button>
    </div>
  </div>

  <div id="errorCard" class="card error hidden"></div>

  <div id="loading" class="loading hidden"><div class="spinner"></div>Menghasilkan...</div>

  <div id="results" class="hidden">
    <div class="card">
      <div class="grid" id="fieldGrid">
        <div class="column-header">
          <h2>Bahasa Indonesia</h2>
          <button class="copy-btn" data-target="id-all" data-label="Salin Semua">Salin Semua</button>
        </div>
        <div class="column-header">
          <h2>English (Final)</h2>
          <button class="copy-btn" data-target="en-all" data-label="Salin Semua">Salin Semua</button>
        </div>
      </div>
    </div>

    <div class="card" style="margin-top: 20px">
      <div class="final-header">
        <h2>Hasil Akhir (JSON)</h2>
        <button class="copy-btn" data-target="json-final" data-label="Salin">Salin</button>
      </div>
      <pre><code id="finalPrompt"></code></pre>
    </div>
  </div>
</main>
<script>
  const SESSION_ID = /*__SESSION_ID__*/;
  const FIELDS = ['background', 'subject', 'pose', 'camera'];
  const COPY_FEEDBACK_MS = 2000;
  const POLL_MS = 400;

  const ideaEl = document.getElementById('idea');
  const generateBtn = document.getElementById('generateBtn');
  const errorCard = document.getElementById('errorCard');
  const loadingEl = document.getElementById('loading');
  const resultsEl = document.getElementById('results');
  const gridEl = document.getElementById('fieldGrid');
  const finalEl = document.getElementById('finalPrompt');

  let state = null;
  const nativeEls = {};
  const translatedEls = {};
  const editTimers = {};

  // ── Field rows ──
  FIELDS.forEach(field => {
    const left = document.createElement('div');
    const leftLabel = document.createElement('label');
    leftLabel.textContent = field;
    const input = document.createElement('textarea');
    input.rows = 1;
    input.addEventListener('input', () => {
      autoResize(input);
      clearTimeout(editTimers[field]);
      editTimers[field] = setTimeout(() => editField(field, input.value), 300);
    });
    left.appendChild(leftLabel);
    left.appendChild(input);

    const right = document.createElement('div');
    const rightLabel = document.createElement('label');
    rightLabel.textContent = field;
    const output = document.createElement('div');
    output.className = 'translated';
    right.appendChild(rightLabel);
    right.appendChild(output);

    gridEl.appendChild(left);
    gridEl.appendChild(right);
    nativeEls[field] = input;
    translatedEls[field] = output;
  });

  function autoResize(el) {
    el.style.height = 'auto';
    el.style.height = el.scrollHeight + 'px';
  }

  // ── API helper ──
  async function api(path, method, body) {
    const opts = { method: method || 'GET', headers: { 'Content-Type': 'application/json' } };
    if (body !== undefined) opts.body = JSON.stringify(body);
    const res = await fetch('/api/sessions/' + SESSION_ID + path, opts);
    const data = await res.json();
    return { ok: res.ok, data };
  }

  // ── Rendering ──
  function render(next) {
    state = next;

    errorCard.classList.toggle('hidden', !state.error);
    errorCard.textContent = state.error || '';

    loadingEl.classList.toggle('hidden', !state.loading);
    generateBtn.disabled = state.loading;
    generateBtn.textContent = state.loading ? 'Menghasilkan...' : 'Buat Prompt';

    const showResults = state.has_results && !state.loading;
    resultsEl.classList.toggle('hidden', !showResults);
    if (!showResults) return;

    FIELDS.forEach(field => {
      const input = nativeEls[field];
      if (document.activeElement !== input && input.value !== state.native[field]) {
        input.value = state.native[field];
      }
      const output = translatedEls[field];
      output.classList.toggle('pending', state.translating);
      output.textContent = state.translating ? 'Menerjemahkan...' : state.translated[field];
    });
    requestAnimationFrame(() => FIELDS.forEach(f => autoResize(nativeEls[f])));

    finalEl.textContent = state.final_prompt;

    document.querySelectorAll('.copy-btn').forEach(btn => {
      const feedback = state.copy_feedback[btn.dataset.target];
      btn.textContent = feedback || btn.dataset.label;
    });
  }

  async function refresh() {
    const { ok, data } = await api('');
    if (ok) render(data);
  }

  // ── Generate ──
  ideaEl.addEventListener('keydown', e => {
    if (e.key === 'Enter' && (e.metaKey || e.ctrlKey)) { e.preventDefault(); generatePrompt(); }
  });

  async function generatePrompt() {
    if (generateBtn.disabled) return;
    generateBtn.disabled = true;
    const poller = setInterval(refresh, POLL_MS);
    try {
      const { data } = await api('/generate', 'POST', { idea: ideaEl.value });
      clearInterval(poller);
      if (data.phase !== undefined) render(data);
    } catch (e) {
      clearInterval(poller);
      errorCard.classList.remove('hidden');
      errorCard.textContent = e.message;
    } finally {
      generateBtn.disabled = state ? state.loading : false;
    }
  }

  // ── Edits ──
  async function editField(field, value) {
    const { ok, data } = await api('/fields/' + field, 'PATCH', { value });
    if (ok) render(data);
  }

  // ── Copy ──
  document.querySelectorAll('.copy-btn').forEach(btn => {
    btn.addEventListener('click', () => copyTarget(btn.dataset.target));
  });

  const COPY_SOURCES = {
    'id-all': s => s.combined_native,
    'en-all': s => s.combined_translated,
    'json-final': s => s.final_prompt,
  };

  async function copyTarget(target) {
    const text = state ? COPY_SOURCES[target](state) : '';
    if (!text || !navigator.clipboard) return;
    let body;
    try {
      await navigator.clipboard.writeText(text);
      body = { target, ok: true };
    } catch (e) {
      console.error('Could not copy text: ', e);
      body = { target, ok: false, reason: String(e) };
    }
    const { ok, data } = await api('/copy', 'POST', body);
    if (ok) render(data);
    setTimeout(refresh, COPY_FEEDBACK_MS + 50);
  }

  refresh();
</script>
</body>
</html>
"""


def main():
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(GeminiPromptService.from_settings())
    logger.info("Serving on port %s with model %s", settings.PORT, settings.GEMINI_MODEL)
    app.run(port=settings.PORT, threaded=True)


if __name__ == "__main__":
    main()

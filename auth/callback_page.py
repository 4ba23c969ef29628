from __future__ import annotations

import html

CAPTURE_MESSAGE = "请复制此页面的完整URL"

_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      min-height: 100vh;
      display: flex;
      align-items: center;
      justify-content: center;
      padding: 20px;
    }
    .container {
      background: white;
      border-radius: 16px;
      box-shadow: 0 20px 60px rgba(0, 0, 0, 0.3);
      padding: 40px;
      max-width: 600px;
      width: 100%;
      text-align: center;
    }
    .icon { font-size: 72px; margin-bottom: 16px; }
    h1 { margin-bottom: 12px; font-size: 28px; }
    .message { color: #4b5563; font-size: 16px; line-height: 1.6; margin-bottom: 20px; }
    .url-box {
      background: #f3f4f6;
      padding: 14px;
      border-radius: 10px;
      word-break: break-all;
      font-family: monospace;
      font-size: 13px;
      color: #1f2937;
      margin-bottom: 14px;
      text-align: left;
      max-height: 160px;
      overflow-y: auto;
      user-select: all;
    }
    .btn {
      background: linear-gradient(135deg, #3b82f6 0%, #2563eb 100%);
      color: white;
      border: none;
      padding: 12px 20px;
      border-radius: 8px;
      font-size: 15px;
      font-weight: 600;
      cursor: pointer;
      display: inline-block;
      margin: 4px;
    }
    .btn.secondary { background: linear-gradient(135deg, #6b7280 0%, #4b5563 100%); }
    .instructions {
      background: #fef3c7;
      border-left: 4px solid #f59e0b;
      padding: 12px;
      border-radius: 8px;
      margin-top: 16px;
      text-align: left;
      font-size: 13px;
    }
    .instructions strong { color: #92400e; display: block; margin-bottom: 8px; }
    .instructions ol { margin-left: 18px; color: #78350f; }
    .instructions li { margin-bottom: 6px; }
"""

_COPY_SCRIPT = """
    function copyUrl() {
      const url = document.getElementById('urlText').textContent;
      navigator.clipboard.writeText(url).then(() => {
        const btn = document.getElementById('copyBtn');
        const originalText = btn.textContent;
        btn.textContent = '✅ 已复制';
        setTimeout(() => { btn.textContent = originalText; }, 1800);
      }).catch(() => { alert('复制失败，请手动选择并复制'); });
    }
"""


def _capture_block(url: str) -> str:
    return f"""
    <div class="url-box" id="urlText">{html.escape(url)}</div>
    <button class="btn" id="copyBtn" onclick="copyUrl()">📋 复制URL</button>
    <div class="instructions">
      <strong>⚠️ 重要步骤：</strong>
      <ol>
        <li>点击上方按钮复制完整的URL</li>
        <li>返回到 /auth 页面</li>
        <li>将URL粘贴到输入框中</li>
        <li>点击"提交"完成授权</li>
      </ol>
    </div>"""


def render_callback_page(success: bool, message: str, url: str = "") -> str:
    """Render the page the provider redirects the browser to.

    With ``success`` and a ``url`` this is the capture page: the full URL as
    selectable text, a copy button and the steps for pasting it back into the
    /auth form. Otherwise it is the denial page with only the message.
    """
    icon = "📋" if success else "❌"
    title = "复制URL" if success else "授权失败"
    color = "#3b82f6" if success else "#ef4444"
    capture = _capture_block(url) if success and url else ""
    script = f"<script>{_COPY_SCRIPT}</script>" if capture else ""

    return f"""<!DOCTYPE html>
<html lang="zh-CN">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>{_STYLE}</style>
  {script}
</head>
<body>
  <div class="container">
    <div class="icon">{icon}</div>
    <h1 style="color: {color};">{title}</h1>
    <div class="message">{html.escape(message)}</div>{capture}
    <button class="btn secondary" onclick="window.close()">关闭窗口</button>
  </div>
</body>
</html>"""

"""
Stylesheet and inline script of the portable export. The script re-implements the radial
layout, colors, done inheritance, a reduced pan/zoom viewport and the attachment viewer;
every numeric constant is injected from the Python modules so both sides place nodes alike.
"""
from __future__ import annotations

import json
from typing import Any

from ..layout import radial, style, text
from ..tree.model import CENTER_ID, DEFAULT_CENTER_COLOR, DEFAULT_ATTACHMENT_NAME
from ..viewport import controller as viewport

DATA_ELEMENT_ID = "__SKM_DATA__"
ATTACHMENT_ID_PREFIX = "__SKM_ATT_"

# Stage padding around the node bounds (px); shadows need more room below
EXPORT_MIN_PADDING_PX = 18
EXPORT_SHADOW_PAD_X = 36
EXPORT_SHADOW_PAD_TOP = 24
EXPORT_SHADOW_PAD_BOTTOM = 48

CLICK_SUPPRESS_MS = 250
POPUP_BLOCKED_MESSAGE = "Could not open a new tab (popup blocked). Please allow popups for this site."


def runtime_constants() -> dict[str, Any]:
    return {
        "DATA_ID": DATA_ELEMENT_ID,
        "CENTER_ID": CENTER_ID,
        "DEFAULT_CENTER_COLOR": DEFAULT_CENTER_COLOR,
        "DEFAULT_ATTACHMENT_NAME": DEFAULT_ATTACHMENT_NAME,
        "UNKNOWN_NODE_COLOR": style.UNKNOWN_NODE_COLOR,
        "BRANCH_COLORS": list(style.BRANCH_COLORS),
        "R_CENTER": radial.R_CENTER,
        "R_ROOT": radial.R_ROOT,
        "R_CHILD": radial.R_CHILD,
        "ROOT_RADIUS": radial.ROOT_RADIUS,
        "RING": radial.RING,
        "SPREAD_PER_CHILD": radial.SPREAD_PER_CHILD,
        "SPREAD_MIN": radial.SPREAD_MIN,
        "SPREAD_MAX": radial.SPREAD_MAX,
        "MIN_Z": viewport.MIN_Z,
        "MAX_Z": viewport.MAX_Z,
        "WHEEL_FACTOR": viewport.WHEEL_FACTOR,
        "CLICK_SLOP": viewport.CLICK_SLOP,
        "CLICK_SUPPRESS_MS": CLICK_SUPPRESS_MS,
        "MAXLEN_CENTER": text.MAXLEN_CENTER,
        "MAXLEN_ROOT_AND_CHILD": text.MAXLEN_ROOT_AND_CHILD,
        "MAX_TITLE_LINES": text.MAX_TITLE_LINES,
        "PAD_MIN": EXPORT_MIN_PADDING_PX,
        "PAD_X": EXPORT_SHADOW_PAD_X,
        "PAD_TOP": EXPORT_SHADOW_PAD_TOP,
        "PAD_BOTTOM": EXPORT_SHADOW_PAD_BOTTOM,
        "POPUP_BLOCKED": POPUP_BLOCKED_MESSAGE,
    }


STYLE = """
  html,body{ height:100%; margin:0; background:#0b1220; color:rgba(255,255,255,0.92);
    font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial; overflow:hidden; overscroll-behavior:none; }
  :root{ --panel: rgba(2,6,23,0.82); --border: rgba(255,255,255,0.10); --muted: rgba(255,255,255,0.65);
    --accent:#fbbf24; --shadow: 0 12px 36px rgba(0,0,0,0.18); }
  .topbar{ position:fixed; left:14px; right:14px; top:14px; z-index:10; display:flex; align-items:center;
    justify-content:space-between; gap:12px; padding:10px 12px; border-radius:14px; background:var(--panel);
    border:1px solid var(--border); box-shadow:var(--shadow); backdrop-filter: blur(10px); }
  .title{ font-weight:900; font-size:14px; display:flex; gap:10px; align-items:baseline; }
  .title .brand{ color:var(--accent); }
  .title .name{ max-width:55vw; overflow:hidden; text-overflow:ellipsis; white-space:nowrap; }
  .hint{ color:var(--muted); font-size:12px; white-space:nowrap; }
  .btn,.btnSm{ appearance:none; border:1px solid var(--border); background:rgba(255,255,255,0.06);
    color:inherit; border-radius:12px; font-weight:800; font-size:12px; cursor:pointer; padding:8px 10px; }
  .btnSm{ padding:6px 8px; border-radius:10px; }
  .btn:hover,.btnSm:hover{ background:rgba(255,255,255,0.10); }
  .btnSm[disabled]{ opacity:0.4; cursor:default; }
  .viewport{ position:absolute; inset:0; touch-action:none; }
  .world{ position:absolute; left:0; top:0; transform-origin:0 0; }
  .map-stage{ position:absolute; left:0; top:0; background:#fff; border-radius:18px; box-shadow:var(--shadow); overflow:hidden; }
  .edges{ position:absolute; inset:0; overflow:visible; pointer-events:none; }
  .node{ position:absolute; transform:translate(-50%,-50%); border-radius:999px; box-shadow:var(--shadow);
    display:flex; align-items:center; justify-content:center; text-align:center; font-weight:800; color:#fff;
    user-select:none; cursor:pointer; }
  .node[data-done="true"]::after{ content:""; position:absolute; inset:0; border-radius:999px;
    background:rgba(255,255,255,0.28); pointer-events:none; }
  .node .text{ position:relative; z-index:1; line-height:1.1; font-size:14px; padding:0 10px; }
  .node .text span{ display:block; white-space:nowrap; }
  .node .clip{ position:absolute; left:-6px; top:-6px; z-index:2; width:22px; height:22px; border-radius:999px;
    background:#0f172a; font-size:12px; display:flex; align-items:center; justify-content:center; }
  .badge{ position:absolute; z-index:2; right:-6px; top:-6px; width:26px; height:26px; border-radius:999px;
    background:#22c55e; display:flex; align-items:center; justify-content:center; font-weight:900; pointer-events:none; }
  .boot{ position:fixed; inset:0; z-index:50; display:flex; align-items:center; justify-content:center;
    padding:22px; background:rgba(11,18,32,0.96); }
  .card{ width:min(520px,92vw); border-radius:16px; background:rgba(2,6,23,0.86);
    border:1px solid rgba(255,255,255,0.12); box-shadow:0 18px 60px rgba(0,0,0,0.35); padding:14px; }
  .cardTitle{ font-weight:900; font-size:13px; margin-bottom:8px; }
  .cardText{ color:rgba(255,255,255,0.74); font-size:12px; line-height:1.35; margin-bottom:10px; }
  .bootErr{ font-family:ui-monospace, Menlo, Consolas, monospace; font-size:11px; white-space:pre-wrap;
    background:rgba(255,255,255,0.06); border-radius:12px; padding:10px; max-height:180px; overflow:auto; }
  .overlay{ position:fixed; inset:0; z-index:30; display:none; background:rgba(2,6,23,0.72); }
  .overlay.open{ display:block; }
  .modal{ position:absolute; left:50%; top:50%; transform:translate(-50%,-50%); width:min(980px,92vw);
    height:min(720px,82vh); display:flex; flex-direction:column; overflow:hidden; border-radius:18px;
    background:rgba(2,6,23,0.94); border:1px solid rgba(255,255,255,0.12); }
  .modalHeader{ display:flex; align-items:center; justify-content:space-between; gap:10px; padding:10px 12px;
    border-bottom:1px solid var(--border); }
  .modalTitle{ font-weight:900; font-size:13px; overflow:hidden; text-overflow:ellipsis; white-space:nowrap; }
  .modalBody{ flex:1; display:flex; min-height:0; }
  .fileList{ width:200px; padding:10px; overflow:auto; border-right:1px solid var(--border); }
  .fileItem{ width:100%; text-align:left; margin-bottom:8px; padding:8px 10px; border-radius:12px;
    border:1px solid var(--border); background:rgba(255,255,255,0.06); color:inherit; font-weight:800;
    font-size:12px; cursor:pointer; overflow:hidden; text-overflow:ellipsis; white-space:nowrap; }
  .fileItem.off{ opacity:0.55; }
  .viewer{ flex:1; min-width:0; position:relative; overflow:hidden; }
  .pdfBar{ position:absolute; left:0; right:0; top:0; height:44px; z-index:2; display:flex; align-items:center;
    justify-content:space-between; gap:10px; padding:0 10px; border-bottom:1px solid var(--border); }
  .pdfInfo{ font-weight:900; font-size:12px; max-width:55%; overflow:hidden; text-overflow:ellipsis; white-space:nowrap; }
  .pdfWrap{ position:absolute; left:0; right:0; top:44px; bottom:0; }
  iframe.pdfFrame{ position:absolute; inset:0; width:100%; height:100%; border:0; background:#0b1220; }
  .pdfMsg{ position:absolute; inset:0; z-index:3; display:flex; align-items:center; justify-content:center; padding:18px; }
  .modal.one .fileList{ display:none; }
  @media (max-width: 820px){
    .modalBody{ flex-direction:column; }
    .fileList{ width:auto; max-height:120px; border-right:none; border-bottom:1px solid var(--border); }
    .hint{ display:none; }
  }
"""

BODY = """
<div class="topbar">
  <div class="title"><span class="brand">SkillMap</span><span class="name" id="tTitle"></span></div>
  <div style="display:flex; gap:10px; align-items:center;">
    <div class="hint">Drag to pan · Wheel/Pinch to zoom · Click a node to open PDFs</div>
    <button class="btn" id="btnCenter">Center</button>
  </div>
</div>
<div class="viewport" id="viewport"><div class="world" id="world"></div></div>
<div class="overlay" id="overlay" aria-hidden="true">
  <div class="modal" id="modal" role="dialog" aria-modal="true">
    <div class="modalHeader">
      <div class="modalTitle" id="modalTitle">Files</div>
      <button class="btn" id="btnClose">Close</button>
    </div>
    <div class="modalBody">
      <div class="fileList" id="fileList"></div>
      <div class="viewer">
        <div class="pdfBar">
          <div class="pdfInfo" id="pdfInfo">PDF</div>
          <div style="display:flex; gap:8px;">
            <button class="btnSm" id="pdfOpen">Open</button>
            <button class="btnSm" id="pdfDownload">Download</button>
          </div>
        </div>
        <div class="pdfWrap">
          <div class="pdfMsg" id="pdfMsg">
            <div class="card"><div class="cardText" id="pdfMsgText">Select a PDF.</div></div>
          </div>
          <iframe class="pdfFrame" id="pdfFrame" title="PDF Viewer"></iframe>
        </div>
      </div>
    </div>
  </div>
</div>
<div class="boot" id="boot">
  <div class="card">
    <div class="cardTitle">Loading map…</div>
    <div class="cardText">If this stays blank, the file viewer may be blocking scripts. Open the file in a browser instead of a preview.</div>
    <div class="bootErr" id="bootErr" style="display:none;"></div>
  </div>
</div>
"""

# Radial layout of the viewer, kept free of DOM access; runs inside SCRIPT with K in scope.
LAYOUT_SCRIPT = r"""
  // ---- layout (mirrors skillmap.layout.radial) ----
  function segmentBetweenCircles(c1x, c1y, r1, c2x, c2y, r2){
    var dx = c2x - c1x, dy = c2y - c1y;
    var len = Math.hypot(dx, dy) || 1;
    var ux = dx / len, uy = dy / len;
    return { x1: c1x + ux * r1, y1: c1y + uy * r1, x2: c2x - ux * r2, y2: c2y - uy * r2 };
  }
  function childSpread(k){
    if (k <= 1) return 0;
    return Math.min(K.SPREAD_MAX, Math.max(K.SPREAD_MIN, (k - 1) * K.SPREAD_PER_CHILD));
  }

  function computeLayout(tasks, nodeOffset){
    var childrenByParent = new Map();
    tasks.forEach(function(t){
      if (!t.parentId) return;
      var arr = childrenByParent.get(t.parentId) || [];
      arr.push(t);
      childrenByParent.set(t.parentId, arr);
    });
    var roots = tasks.filter(function(t){ return !t.parentId; });

    function getOffset(id){
      var o = nodeOffset[id];
      return o ? { x: Number(o.x) || 0, y: Number(o.y) || 0 } : { x: 0, y: 0 };
    }

    var nodes = [];
    var edges = [];
    var pos = {};
    pos[K.CENTER_ID] = { x: 0, y: 0, r: K.R_CENTER };
    nodes.push({ id: K.CENTER_ID, kind: "center", x: 0, y: 0, r: K.R_CENTER });

    function placeChildren(parentId, px, py, pr, gpx, gpy){
      var kids = childrenByParent.get(parentId) || [];
      if (!kids.length) return;
      var base = Math.atan2(py - gpy, px - gpx);
      var spread = childSpread(kids.length);
      var step = kids.length <= 1 ? 0 : spread / (kids.length - 1);
      var start = base - spread / 2;
      for (var i = 0; i < kids.length; i++){
        var kid = kids[i];
        var ang = start + i * step;
        var o = getOffset(kid.id);
        var cx = px + Math.cos(ang) * K.RING + o.x;
        var cy = py + Math.sin(ang) * K.RING + o.y;
        pos[kid.id] = { x: cx, y: cy, r: K.R_CHILD };
        nodes.push({ id: kid.id, kind: "child", x: cx, y: cy, r: K.R_CHILD });
        var seg = segmentBetweenCircles(px, py, pr, cx, cy, K.R_CHILD);
        edges.push({ parentId: parentId, childId: kid.id, seg: seg });
        placeChildren(kid.id, cx, cy, K.R_CHILD, px, py);
      }
    }

    var totalRoots = Math.max(roots.length, 1);
    roots.forEach(function(root, i){
      var ang = i / totalRoots * Math.PI * 2;
      var o = getOffset(root.id);
      var rx = Math.cos(ang) * K.ROOT_RADIUS + o.x;
      var ry = Math.sin(ang) * K.ROOT_RADIUS + o.y;
      pos[root.id] = { x: rx, y: ry, r: K.R_ROOT };
      nodes.push({ id: root.id, kind: "root", x: rx, y: ry, r: K.R_ROOT });
      edges.push({ parentId: K.CENTER_ID, childId: root.id, seg: segmentBetweenCircles(0, 0, K.R_CENTER, rx, ry, K.R_ROOT) });
    });
    roots.forEach(function(root){
      var p = pos[root.id];
      placeChildren(root.id, p.x, p.y, K.R_ROOT, 0, 0);
    });
    return { nodes: nodes, edges: edges, pos: pos };
  }
"""

SCRIPT = r"""
(function(){
  "use strict";
  var K = __SKM_CONSTANTS__;

  var boot = document.getElementById("boot");
  var bootErr = document.getElementById("bootErr");
  function showBootError(err){
    if (!bootErr) return;
    bootErr.style.display = "block";
    bootErr.textContent = String(err && (err.stack || err.message || err) || "Unknown error");
  }
  window.addEventListener("error", function(e){ showBootError(e && (e.error || e.message)); });

  var ua = navigator.userAgent || "";
  var IS_IOS = /iPad|iPhone|iPod/i.test(ua) || (navigator.platform === "MacIntel" && navigator.maxTouchPoints > 1);

  var DATA;
  try{
    DATA = JSON.parse(document.getElementById(K.DATA_ID).textContent || "{}");
  }catch(err){
    showBootError(err);
    return;
  }

  var CENTER_ID = K.CENTER_ID;
  var projectTitle = String(DATA.projectTitle || "").trim() || "Project";
  document.getElementById("tTitle").textContent = projectTitle;

  var tasks = Array.isArray(DATA.tasks) ? DATA.tasks.filter(function(t){ return t && t.id; }) : [];
  var nodeOffset = DATA.nodeOffset || {};
  var branchColorOverride = DATA.branchColorOverride || {};
  var branchEdgeColorOverride = DATA.branchEdgeColorOverride || {};
  var edgeColorOverride = DATA.edgeColorOverride || {};

  var taskById = new Map(tasks.map(function(t){ return [t.id, t]; }));
  var roots = tasks.filter(function(t){ return !t.parentId; });
  var rootIndex = new Map(roots.map(function(r, i){ return [r.id, i]; }));

  function rootOf(id){
    var cur = taskById.get(id);
    while (cur && cur.parentId && taskById.has(cur.parentId)) cur = taskById.get(cur.parentId);
    return cur ? cur.id : id;
  }

  function splitTitleLines(t, maxLen, maxLines){
    var s = String(t || "").trim() || "Project";
    var hardParts = s.split(/\r?\n/);
    var lines = [];
    for (var hp = 0; hp < hardParts.length; hp++){
      var part = hardParts[hp];
      while (part.length > 0 && lines.length < maxLines){
        if (part.length <= maxLen){ lines.push(part); part = ""; break; }
        var breakAt = part.lastIndexOf(" ", maxLen);
        if (breakAt > 0){
          lines.push(part.slice(0, breakAt));
          part = part.slice(breakAt + 1);
        } else {
          var sliceLen = Math.max(1, maxLen - 1);
          lines.push(part.slice(0, sliceLen) + "-");
          part = part.slice(sliceLen);
        }
      }
      if (lines.length >= maxLines) break;
    }
    return lines.slice(0, maxLines);
  }
__SKM_LAYOUT__
  var layout = computeLayout(tasks, nodeOffset);
  var nodes = layout.nodes;
  var edges = layout.edges;

  // ---- colors (mirrors skillmap.layout.style) ----
  function rootColor(rootId){
    var idx = rootIndex.has(rootId) ? rootIndex.get(rootId) : 0;
    return branchColorOverride[rootId] || K.BRANCH_COLORS[idx % K.BRANCH_COLORS.length];
  }
  function nodeColor(id){
    if (id === CENTER_ID) return DATA.centerColor || K.DEFAULT_CENTER_COLOR;
    var t = taskById.get(id);
    if (!t) return K.UNKNOWN_NODE_COLOR;
    var rid = rootOf(id);
    if (t.parentId){
      if (t.color) return t.color;
      var cur = taskById.get(t.parentId);
      while (cur && cur.id !== rid){
        if (cur.color) return cur.color;
        cur = cur.parentId ? taskById.get(cur.parentId) : null;
      }
    }
    return rootColor(rid);
  }
  function edgeColor(parentId, childId){
    var rid = rootOf(childId);
    var base = branchEdgeColorOverride[rid] || rootColor(rid);
    return edgeColorOverride[parentId + "__" + childId] || base;
  }

  function effectiveDone(id){
    if (id === CENTER_ID) return !!DATA.centerDone;
    var cur = taskById.get(id);
    while (cur){
      if (typeof cur.done === "boolean") return cur.done;
      cur = cur.parentId ? taskById.get(cur.parentId) : null;
    }
    return !!DATA.centerDone;
  }

  function getAttachments(id){
    if (id === CENTER_ID) return Array.isArray(DATA.centerAttachments) ? DATA.centerAttachments : [];
    var t = taskById.get(id);
    return (t && Array.isArray(t.attachments)) ? t.attachments : [];
  }

  // ---- stage ----
  var minX = Infinity, minY = Infinity, maxX = -Infinity, maxY = -Infinity;
  nodes.forEach(function(n){
    minX = Math.min(minX, n.x - n.r); maxX = Math.max(maxX, n.x + n.r);
    minY = Math.min(minY, n.y - n.r); maxY = Math.max(maxY, n.y + n.r);
  });
  minX -= K.PAD_X + K.PAD_MIN; maxX += K.PAD_X + K.PAD_MIN;
  minY -= K.PAD_TOP + K.PAD_MIN; maxY += K.PAD_BOTTOM + K.PAD_MIN;
  var width = Math.max(1, Math.ceil(maxX - minX));
  var height = Math.max(1, Math.ceil(maxY - minY));
  var originX = -minX, originY = -minY;

  var worldEl = document.getElementById("world");
  var viewportEl = document.getElementById("viewport");
  var stage = document.createElement("div");
  stage.className = "map-stage";
  stage.style.width = width + "px";
  stage.style.height = height + "px";

  var SVG_NS = "http://www.w3.org/2000/svg";
  var svg = document.createElementNS(SVG_NS, "svg");
  svg.setAttribute("class", "edges");
  svg.setAttribute("width", String(width));
  svg.setAttribute("height", String(height));
  edges.forEach(function(e){
    var line = document.createElementNS(SVG_NS, "line");
    line.setAttribute("x1", String(originX + e.seg.x1));
    line.setAttribute("y1", String(originY + e.seg.y1));
    line.setAttribute("x2", String(originX + e.seg.x2));
    line.setAttribute("y2", String(originY + e.seg.y2));
    line.setAttribute("stroke", edgeColor(e.parentId, e.childId));
    line.setAttribute("stroke-width", "3");
    line.setAttribute("stroke-linecap", "round");
    svg.appendChild(line);
  });
  stage.appendChild(svg);

  var suppressClickUntil = 0;
  function suppressClick(){ suppressClickUntil = Date.now() + K.CLICK_SUPPRESS_MS; }

  nodes.forEach(function(n){
    var el = document.createElement("div");
    el.className = "node";
    el.style.left = (originX + n.x) + "px";
    el.style.top = (originY + n.y) + "px";
    el.style.width = (n.r * 2) + "px";
    el.style.height = (n.r * 2) + "px";
    el.style.background = nodeColor(n.id);
    el.dataset.id = n.id;
    var done = effectiveDone(n.id);
    el.dataset.done = done ? "true" : "false";

    var title = n.id === CENTER_ID ? projectTitle : ((taskById.get(n.id) || {}).title || "Task");
    var maxLen = n.kind === "center" ? K.MAXLEN_CENTER : K.MAXLEN_ROOT_AND_CHILD;
    var textEl = document.createElement("div");
    textEl.className = "text";
    splitTitleLines(title, maxLen, K.MAX_TITLE_LINES).forEach(function(line){
      var sp = document.createElement("span");
      sp.textContent = line;
      textEl.appendChild(sp);
    });
    el.appendChild(textEl);

    if (done){
      var badge = document.createElement("div");
      badge.className = "badge";
      badge.textContent = "✓";
      el.appendChild(badge);
    }
    if (getAttachments(n.id).length){
      var clip = document.createElement("div");
      clip.className = "clip";
      clip.textContent = "📎";
      el.appendChild(clip);
    }

    el.addEventListener("click", function(ev){
      ev.stopPropagation();
      if (Date.now() < suppressClickUntil) return;
      openFilesForNode(n.id);
    });
    stage.appendChild(el);
  });

  worldEl.innerHTML = "";
  worldEl.appendChild(stage);

  // ---- viewport (mirrors skillmap.viewport) ----
  var panX = 0, panY = 0, z = 1;
  var topbarEl = document.querySelector(".topbar");
  function clampZ(v){ return Math.max(K.MIN_Z, Math.min(K.MAX_Z, v)); }
  function applyTransform(){
    worldEl.style.transform = "translate(" + panX + "px," + panY + "px) scale(" + z + ")";
  }
  function centerView(){
    var vw = window.innerWidth, vh = window.innerHeight;
    var tb = topbarEl ? topbarEl.getBoundingClientRect() : { bottom: 74 };
    var top = tb.bottom + 10;
    var usableH = Math.max(1, vh - top - 14);
    z = clampZ(Math.min(1, Math.min((vw * 0.90) / width, (usableH * 0.92) / height)));
    panX = vw / 2 - (width * z) / 2;
    panY = top + usableH / 2 - (height * z) / 2;
    applyTransform();
  }
  document.getElementById("btnCenter").addEventListener("click", centerView);
  window.addEventListener("resize", centerView);
  viewportEl.addEventListener("contextmenu", function(e){ e.preventDefault(); });

  var overlay = document.getElementById("overlay");
  function overlayOpen(){ return overlay.classList.contains("open"); }

  var pointers = new Map();
  var panStart = null;
  var pinchStart = null;

  function capture(id){ try { viewportEl.setPointerCapture(id); } catch (err) {} }
  function release(id){ try { viewportEl.releasePointerCapture(id); } catch (err) {} }

  function pointerPair(){
    var ps = Array.from(pointers.values());
    var a = ps[0], b = ps[1];
    return { midX: (a.x + b.x) / 2, midY: (a.y + b.y) / 2, dist: Math.max(1, Math.hypot(b.x - a.x, b.y - a.y)) };
  }

  viewportEl.addEventListener("pointerdown", function(e){
    if (overlayOpen() || pointers.has(e.pointerId) || pointers.size >= 2) return;
    pointers.set(e.pointerId, { x: e.clientX, y: e.clientY });
    capture(e.pointerId);
    if (pointers.size === 2){
      var pp = pointerPair();
      pinchStart = { dist: pp.dist, midX: pp.midX, midY: pp.midY, z0: z, worldX: (pp.midX - panX) / z, worldY: (pp.midY - panY) / z };
      panStart = null;
      return;
    }
    var onNode = !!(e.target && e.target.closest && e.target.closest(".node"));
    panStart = onNode ? null : { id: e.pointerId, x: e.clientX, y: e.clientY, panX0: panX, panY0: panY };
  });

  viewportEl.addEventListener("pointermove", function(e){
    if (!pointers.has(e.pointerId) || overlayOpen()) return;
    pointers.set(e.pointerId, { x: e.clientX, y: e.clientY });
    if (pinchStart && pointers.size === 2){
      var pp = pointerPair();
      z = clampZ(pinchStart.z0 * pp.dist / pinchStart.dist);
      panX = pp.midX - pinchStart.worldX * z;
      panY = pp.midY - pinchStart.worldY * z;
      if (Math.hypot(pp.midX - pinchStart.midX, pp.midY - pinchStart.midY) > K.CLICK_SLOP ||
          Math.abs(pp.dist - pinchStart.dist) > K.CLICK_SLOP) suppressClick();
      applyTransform();
      return;
    }
    if (panStart && panStart.id === e.pointerId){
      var dx = e.clientX - panStart.x, dy = e.clientY - panStart.y;
      if (Math.hypot(dx, dy) > K.CLICK_SLOP) suppressClick();
      panX = panStart.panX0 + dx;
      panY = panStart.panY0 + dy;
      applyTransform();
    }
  });

  function endPointer(e){
    if (!pointers.has(e.pointerId)) return;
    pointers.delete(e.pointerId);
    release(e.pointerId);
    pinchStart = null;
    if (pointers.size === 1){
      var it = pointers.entries().next().value;
      panStart = { id: it[0], x: it[1].x, y: it[1].y, panX0: panX, panY0: panY };
    } else {
      panStart = null;
    }
  }
  viewportEl.addEventListener("pointerup", endPointer);
  viewportEl.addEventListener("pointercancel", endPointer);

  viewportEl.addEventListener("wheel", function(e){
    e.preventDefault();
    if (overlayOpen()) return;
    var rect = viewportEl.getBoundingClientRect();
    var cx = e.clientX - rect.left, cy = e.clientY - rect.top;
    var wx = (cx - panX) / z, wy = (cy - panY) / z;
    z = clampZ(z * (e.deltaY < 0 ? K.WHEEL_FACTOR : 1 / K.WHEEL_FACTOR));
    panX = cx - wx * z;
    panY = cy - wy * z;
    suppressClick();
    applyTransform();
  }, { passive: false });

  // ---- attachment viewer ----
  var modalEl = document.getElementById("modal");
  var modalTitle = document.getElementById("modalTitle");
  var fileList = document.getElementById("fileList");
  var pdfInfo = document.getElementById("pdfInfo");
  var pdfOpen = document.getElementById("pdfOpen");
  var pdfDownload = document.getElementById("pdfDownload");
  var pdfFrame = document.getElementById("pdfFrame");
  var pdfMsg = document.getElementById("pdfMsg");
  var pdfMsgText = document.getElementById("pdfMsgText");

  var currentUrl = "";
  var currentName = K.DEFAULT_ATTACHMENT_NAME;

  function showCard(text){ pdfMsgText.textContent = text || ""; pdfMsg.style.display = "flex"; }
  function hideCard(){ pdfMsg.style.display = "none"; }
  function setActions(enabled){ pdfOpen.disabled = !enabled; pdfDownload.disabled = !enabled; }

  function clearCurrent(){
    if (currentUrl){ try { URL.revokeObjectURL(currentUrl); } catch (err) {} }
    currentUrl = "";
    pdfFrame.src = "about:blank";
    setActions(false);
  }

  function resolveAttachment(att){
    if (!att) return { url: "" };
    if (att.unavailable) return { url: "", unavailable: String(att.unavailable) };
    if (att.ref){
      var el = document.getElementById(att.ref);
      return { url: el && el.textContent ? el.textContent.trim() : "" };
    }
    return { url: String(att.dataUrl || "") };
  }

  function dataUrlToBytes(dataUrl){
    var comma = dataUrl.indexOf(",");
    if (!dataUrl.startsWith("data:") || comma < 0 || !/;base64/i.test(dataUrl.slice(0, comma))) return null;
    try{
      var bin = atob(dataUrl.slice(comma + 1));
      var bytes = new Uint8Array(bin.length);
      for (var i = 0; i < bin.length; i++) bytes[i] = bin.charCodeAt(i);
      return bytes;
    }catch(err){
      return null;
    }
  }

  function openPdf(att){
    clearCurrent();
    var r = resolveAttachment(att);
    currentName = String((att && att.name) || K.DEFAULT_ATTACHMENT_NAME);
    pdfInfo.textContent = currentName;
    if (r.unavailable){
      showCard("This PDF was stored as a " + r.unavailable + ": reference and is not portable. Re-attach it so it is embedded in the file.");
      return;
    }
    if (!r.url){ showCard("No PDF data."); return; }
    var bytes = dataUrlToBytes(r.url);
    if (!bytes){ showCard("Could not decode PDF data."); return; }
    currentUrl = URL.createObjectURL(new Blob([bytes], { type: "application/pdf" }));
    setActions(true);
    showCard(IS_IOS ? "PDF ready. Tap Open if it does not show inline." : "Loading PDF…");
    pdfFrame.src = currentUrl;
  }

  pdfFrame.addEventListener("load", function(){
    if (currentUrl && !IS_IOS) hideCard();
  });

  pdfOpen.addEventListener("click", function(){
    if (!currentUrl) return;
    var w = window.open(currentUrl, "_blank");
    if (!w){ window.alert(K.POPUP_BLOCKED); return; }
    try { w.opener = null; } catch (err) {}
  });

  pdfDownload.addEventListener("click", function(){
    if (!currentUrl) return;
    var a = document.createElement("a");
    a.href = currentUrl;
    a.download = currentName;
    a.rel = "noopener";
    a.style.display = "none";
    document.body.appendChild(a);
    a.click();
    a.remove();
  });

  function closeOverlay(){
    overlay.classList.remove("open");
    overlay.setAttribute("aria-hidden", "true");
    fileList.innerHTML = "";
    modalEl.classList.remove("one");
    clearCurrent();
    showCard("Select a PDF.");
  }
  document.getElementById("btnClose").addEventListener("click", closeOverlay);
  overlay.addEventListener("click", function(e){ if (e.target === overlay) closeOverlay(); });
  window.addEventListener("keydown", function(e){ if (e.key === "Escape") closeOverlay(); });

  function openFilesForNode(nodeId){
    var atts = getAttachments(nodeId).filter(function(a){ return a && (a.ref || a.dataUrl || a.unavailable); });
    if (!atts.length) return;
    overlay.classList.add("open");
    overlay.setAttribute("aria-hidden", "false");
    modalTitle.textContent = nodeId === CENTER_ID ? projectTitle : ((taskById.get(nodeId) || {}).title || "Task");
    modalEl.classList.toggle("one", atts.length === 1);
    fileList.innerHTML = "";
    atts.forEach(function(att){
      var b = document.createElement("button");
      b.className = "fileItem" + (att.unavailable ? " off" : "");
      b.textContent = att.name || K.DEFAULT_ATTACHMENT_NAME;
      b.addEventListener("click", function(){ openPdf(att); });
      fileList.appendChild(b);
    });
    openPdf(atts[0]);
  }

  try{
    setActions(false);
    centerView();
    boot.style.display = "none";
  }catch(err){
    showBootError(err);
  }
})();
"""


def build_script() -> str:
    """Inline script with the layout/viewport constants substituted."""
    script = SCRIPT.replace("__SKM_LAYOUT__", LAYOUT_SCRIPT)
    return script.replace("__SKM_CONSTANTS__", json.dumps(runtime_constants()))

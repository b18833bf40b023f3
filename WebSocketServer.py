import json
import logging
from typing import List

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from Analyzer.ContractAnalyzer import ContractAnalyzer
from Analyzer.Harness import RecordingHarness
from Interpreter.Errors import CompilationError

log = logging.getLogger(__name__)

app = FastAPI()
contract_analyzer = ContractAnalyzer()


# 클라이언트 연결을 관리하는 클래스
class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        self.active_connections.remove(websocket)

    async def send_personal_message(self, message: str, websocket: WebSocket):
        await websocket.send_text(message)


manager = ConnectionManager()


def run_request(request: dict) -> dict:
    """
    request = {"source", "filename"?, "contract"?, "testcase"?, "ast"?}
    """
    source = request.get("source", "")
    filename = request.get("filename", "<stdin>")
    try:
        if request.get("ast") is not None:
            unit = contract_analyzer.load_ast(request["ast"])
        else:
            unit = contract_analyzer.compile(source)
    except CompilationError as e:
        return {"ok": False, "error": str(e), "results": []}

    # 요청마다 새 ledger
    contract_analyzer.recorder.clear()
    harness = RecordingHarness()
    results = contract_analyzer.run(unit, source, filename, harness=harness,
                                    contract=request.get("contract"),
                                    testcase=request.get("testcase"))
    return {
        "ok": all(r.success for r in results),
        "results": [r.to_dict() for r in results],
        "harnessCalls": [m for m, _ in harness.calls],
        "summary": contract_analyzer.recorder.summary(),
    }


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                request = json.loads(data)
            except json.JSONDecodeError as e:
                await manager.send_personal_message(json.dumps({"ok": False, "error": f"invalid JSON: {e}"}),
                                                    websocket)
                continue
            await manager.send_personal_message(json.dumps(run_request(request)), websocket)
    except WebSocketDisconnect:
        manager.disconnect(websocket)
        log.info("client disconnected")

import os
import uvicorn

if __name__ == "__main__":
    # 設定の読み込みと環境変数のセットアップ
    # ロガーがインポートされる前に行い、ログの出力先を確定させる
    from config import settings
    settings.setup_environment()

    from main import app

    # ポート番号は環境変数 PORT を優先 (デフォルト 3001)
    port = int(os.environ.get("PORT", settings.PORT))

    print(f"Starting Setlist Manager API on port {port}...")
    print(f"User Data Directory: {settings.USER_DATA_DIR}")
    uvicorn.run(app, host="0.0.0.0", port=port, reload=False, workers=1)

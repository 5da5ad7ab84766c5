from flask import Flask, render_template, request, jsonify
import requests
import os

app = Flask(__name__)
app.config['SEND_FILE_MAX_AGE_DEFAULT'] = 0  # Disable caching for development

# Version for cache busting
APP_VERSION = "1.0.0"

# API base URL
API_URL = os.getenv("API_URL", "http://localhost:8000")

SUCCESS_MESSAGE = "All data is sent to admin email."
FAILURE_MESSAGE = "An error occurred. Please try again."
INVALID_MESSAGE = "Please enter a valid year and month (1-12)."

YEAR_RANGE = (2000, 2100)


@app.after_request
def add_header(response):
    """Add headers to prevent caching during development"""
    response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
    response.headers['X-App-Version'] = APP_VERSION
    return response


@app.route('/')
def index():
    """Main page with the year/month/email form"""
    return render_template('index.html', year_min=YEAR_RANGE[0], year_max=YEAR_RANGE[1])


@app.route('/favicon.ico')
def favicon():
    """Prevent 404 errors for favicon requests"""
    return '', 204


def _valid_year_month(year, month):
    try:
        year, month = int(year), int(month)
    except (TypeError, ValueError):
        return False
    return YEAR_RANGE[0] <= year <= YEAR_RANGE[1] and 1 <= month <= 12


@app.route('/generate', methods=['POST'])
def generate():
    """Validate the form and forward it to the API"""
    data = request.get_json(silent=True) or request.form.to_dict()

    year = str(data.get('year', '')).strip()
    month = str(data.get('month', '')).strip()
    email = str(data.get('email', '')).strip()

    if not _valid_year_month(year, month):
        return jsonify({"success": False, "message": INVALID_MESSAGE}), 400

    if not email:
        return jsonify({"success": False, "message": FAILURE_MESSAGE}), 400

    try:
        # Consolidation downloads every invoice; allow it plenty of time
        response = requests.post(
            f"{API_URL}/api/generate-pdf",
            json={"year": year, "month": month, "email": email},
            timeout=600
        )
    except requests.exceptions.RequestException as e:
        app.logger.error(f"[GENERATE] API call failed: {e}")
        return jsonify({"success": False, "message": FAILURE_MESSAGE}), 502

    if response.status_code == 200:
        return jsonify({"success": True, "message": SUCCESS_MESSAGE})

    app.logger.warning(f"[GENERATE] API returned {response.status_code}")
    return jsonify({"success": False, "message": FAILURE_MESSAGE}), response.status_code


if __name__ == '__main__':
    app.run(debug=True, port=5000)

import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT = 10


class ApiClientError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_auth_failure(self):
        # Callers send the user back to the login flow on these
        return self.status_code == 401


class ApiSession:
    def __init__(self, token=None):
        self.token = token

    @property
    def is_authenticated(self):
        return self.token is not None

    def clear(self):
        self.token = None

    def auth_headers(self):
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}


class ZoneCheckerClient:
    def __init__(self, base_url=DEFAULT_BASE_URL, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session or ApiSession()
        self.timeout = timeout
        self.http = requests.Session()

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        headers = kwargs.pop('headers', {})
        headers.update(self.session.auth_headers())
        try:
            res = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            logger.error("API request timeout: %s %s", method, url)
            raise ApiClientError("Connection timeout. Please check your internet connection and try again.")
        except requests.ConnectionError:
            logger.error("Network error: %s %s", method, url)
            raise ApiClientError("Network error. Please check your internet connection and try again.")

        if res.status_code >= 400:
            try:
                message = res.json().get('message')
            except ValueError:
                message = None
            logger.error("API error: %s %s", res.status_code, message)
            if res.status_code == 401:
                self.session.clear()
            raise ApiClientError(message or f"Request failed with status {res.status_code}", res.status_code)

        if res.headers.get('Content-Type', '').startswith('application/json'):
            return res.json()
        return res.content

    # --- Auth ---
    def login(self, username, password):
        data = self._request('POST', '/auth/login', json={"username": username, "password": password})
        self.session.token = data['token']
        return data

    def logout(self):
        self.session.clear()

    def get_current_user(self):
        return self._request('GET', '/users/me')

    def change_password(self, user_id, new_password, current_password=None):
        payload = {"newPassword": new_password}
        if current_password is not None:
            payload["currentPassword"] = current_password
        return self._request('PUT', f'/users/{user_id}/change-password', json=payload)

    # --- Users ---
    def get_users(self):
        return self._request('GET', '/users')

    def get_user(self, user_id):
        return self._request('GET', f'/users/{user_id}')

    def create_user(self, user_data):
        return self._request('POST', '/users', json=user_data)

    def update_user(self, user_id, user_data):
        return self._request('PUT', f'/users/{user_id}', json=user_data)

    def delete_user(self, user_id):
        return self._request('DELETE', f'/users/{user_id}')

    # --- Zones ---
    def get_zones(self):
        return self._request('GET', '/cities')

    def create_zone(self, name):
        return self._request('POST', '/cities', json={"name": name})

    def update_zone_status(self, city_id, status, comment=''):
        return self._request('POST', '/status-update', json={"cityId": city_id, "status": status, "comment": comment})

    def get_status_history(self, city_id):
        return self._request('GET', f'/status-history/{city_id}')

    # --- Tasks ---
    def get_tasks(self):
        return self._request('GET', '/tasks')

    def create_task(self, title, description='', assigned_zones=(), due_date=None):
        payload = {"title": title, "description": description, "assignedZones": list(assigned_zones)}
        if due_date is not None:
            payload["dueDate"] = due_date
        return self._request('POST', '/tasks', json=payload)

    def update_task_status(self, task_id, status):
        return self._request('PUT', f'/tasks/{task_id}/status', json={"status": status})

    def add_task_comment(self, task_id, comment):
        return self._request('POST', f'/tasks/{task_id}/comments', json={"comment": comment})

    def delete_task(self, task_id):
        return self._request('DELETE', f'/tasks/{task_id}')

    # --- Reports ---
    def get_task_status_report(self, timeframe='weekly'):
        return self._request('GET', '/reports/task-status', params={"timeframe": timeframe})

    def get_zone_performance_report(self):
        return self._request('GET', '/reports/zone-performance')

    def export_zone_performance(self, fmt='csv'):
        return self._request('GET', '/reports/zone-performance/export', params={"format": fmt})

#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (c) 2025 Battelle Energy Alliance, LLC.  All rights reserved.

"""Centralized constants for the provisioning plans.

Product versions, paths, ports, compose files and polling budgets live here so
that the plan builders in installer/actions read as a list of steps.
"""

###################################################################################################
# Option defaults
DEFAULT_ADMIN_EMAIL = "test@test.edu"
DEFAULT_ADMIN_PASSWORD = "admin"
DEFAULT_ADMIN_FIRST_NAME = "admin"
DEFAULT_ADMIN_LAST_NAME = "user"
DEFAULT_SERVER_URL = "http://localhost:8080/server"
DEFAULT_UI_URL = "http://localhost:4000"
DEFAULT_SITE_NAME = "DSpace"

# weaker than this draws a warning (or a failure with --strict-passwords)
MIN_PASSWORD_LENGTH = 4
PLACEHOLDER_PASSWORDS = ("admin", "password", "dspace", "koha", "changeme")

EMAIL_REGEX = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

# prefix for variables read from --env-file (e.g. LIBSTACK_ADMIN_EMAIL)
ENV_VAR_PREFIX = "LIBSTACK_"

###################################################################################################
# Run-once ledger (marker files for actions with no natural probe)
STATE_DIR = "/var/lib/libstack"
LEDGER_FILENAME = "completed_steps"

###################################################################################################
# Docker engine (apt repository install)
DOCKER_APT_PREREQS = ["ca-certificates", "curl", "gnupg", "lsb-release"]
DOCKER_PACKAGES = [
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
]
DOCKER_KEYRING = "/etc/apt/keyrings/docker.gpg"
DOCKER_SOURCES_LIST = "/etc/apt/sources.list.d/docker.list"
DOCKER_REPO_URL = "https://download.docker.com/linux"
DOCKER_GROUP = "docker"

###################################################################################################
# DSpace via Docker Compose
ANGULAR_REPO_URL = "https://github.com/DSpace/dspace-angular.git"
ANGULAR_DIR_NAME = "dspace-angular"
ANGULAR_BRANCH = "main"
COMPOSE_PROJECT = "d9"
COMPOSE_FILE = "docker/docker-compose.yml"
COMPOSE_REST_FILE = "docker/docker-compose-rest.yml"
COMPOSE_CLI_FILE = "docker/cli.yml"
COMPOSE_CLI_INGEST_FILE = "docker/cli.ingest.yml"
COMPOSE_CLI_ASSETSTORE_FILE = "docker/cli.assetstore.yml"
COMPOSE_ENTITIES_FILE = "docker/db.entities.yml"
CLI_SERVICE = "dspace-cli"

CONTAINER_BACKEND = "dspace"
CONTAINER_FRONTEND = "dspace-angular"
CONTAINER_SOLR = "dspacesolr"
CONTAINER_DB = "dspacedb"
REQUIRED_CONTAINERS = [CONTAINER_BACKEND, CONTAINER_FRONTEND, CONTAINER_SOLR, CONTAINER_DB]

DOCKER_UI_URL = "http://localhost:4000/"
DOCKER_REST_URL = "http://localhost:8080/server/"

###################################################################################################
# DSpace native
DSPACE_VERSION = "8.0"
SOLR_VERSION = "8.11.4"
POSTGRES_VERSION = "16"
DSPACE_USER = "dspace"
DSPACE_DIR = "/dspace"
BUILD_DIR = "/build"
DSPACE_DB_NAME = "dspace"
DSPACE_DB_USER = "dspace"

DSPACE_BASE_PACKAGES = ["wget", "curl", "git", "build-essential", "zip", "unzip"]
JDK_PACKAGE = "openjdk-17-jdk"
JAVA_HOME = "/usr/lib/jvm/java-17-openjdk-amd64"
JAVA_OPTS = "-Xmx512M -Xms64M -Dfile.encoding=UTF-8"
ETC_ENVIRONMENT = "/etc/environment"
BUILD_TOOL_PACKAGES = ["maven", "ant"]
POSTGRES_PACKAGES = ["postgresql", "postgresql-client", "postgresql-contrib", "libpostgresql-jdbc-java"]
POSTGRES_CONF_DIR = f"/etc/postgresql/{POSTGRES_VERSION}/main"
PG_HBA_MARKER = "#DSpace configuration"
PG_HBA_ANCHOR = "# Database administrative login by Unix domain socket"

SOLR_ARCHIVE_URL = f"https://downloads.apache.org/lucene/solr/{SOLR_VERSION}/solr-{SOLR_VERSION}.zip"
SOLR_DATA_DIR = "/var/solr/data"
SOLR_URL = "http://localhost:8983/solr/"

DSPACE_SOURCE_URL = f"https://github.com/DSpace/DSpace/archive/refs/tags/dspace-{DSPACE_VERSION}.zip"
DSPACE_SOURCE_DIR = f"{BUILD_DIR}/DSpace-dspace-{DSPACE_VERSION}"
ANGULAR_SOURCE_URL = f"https://github.com/DSpace/dspace-angular/archive/refs/tags/dspace-{DSPACE_VERSION}.zip"
ANGULAR_SOURCE_DIR_NAME = f"dspace-angular-dspace-{DSPACE_VERSION}"

TOMCAT_PACKAGE = "tomcat10"
TOMCAT_SERVICE = "tomcat10"
TOMCAT_UNIT_FILE = "/lib/systemd/system/tomcat10.service"
TOMCAT_SERVER_XML = "/etc/tomcat10/server.xml"
TOMCAT_WEBAPPS_DIR = "/var/lib/tomcat10/webapps"
TOMCAT_CONNECTOR_MARKER = 'disableUploadTimeout="true"'
TOMCAT_CONNECTOR = """    <Connector port="8080" protocol="HTTP/1.1"
               minSpareThreads="25"
               enableLookups="false"
               redirectPort="8443"
               connectionTimeout="20000"
               disableUploadTimeout="true"
               URIEncoding="UTF-8"/>
"""

NODE_PACKAGES = ["nodejs", "npm"]
PM2_APP_NAME = "dspace-ui"
PM2_LOGROTATE_SETTINGS = {
    "pm2-logrotate:max_size": "1000K",
    "pm2-logrotate:compress": "true",
    "pm2-logrotate:rotateInterval": "0 0 19 1 1 7",
}

###################################################################################################
# Koha native
KOHA_INSTANCE = "fuazlibrary"
KOHA_STAFF_PORT = 8000
KOHA_OPAC_PORT = 8001
KOHA_TRANSPORT_PACKAGES = ["apt-transport-https", "ca-certificates", "curl"]
KOHA_KEY_URL = "https://debian.koha-community.org/koha/gpg.asc"
KOHA_KEYRING = "/etc/apt/keyrings/koha.asc"
KOHA_SOURCES_LIST = "/etc/apt/sources.list.d/koha.list"
KOHA_SOURCE_LINE = f"deb [signed-by={KOHA_KEYRING}] https://debian.koha-community.org/koha stable main"
KOHA_PACKAGES = ["koha-common", "mariadb-server"]
KOHA_APACHE_MODULES = ["rewrite", "cgi", "headers", "proxy_http"]
KOHA_SITES_CONF = "/etc/koha/koha-sites.conf"
APACHE_PORTS_CONF = "/etc/apache2/ports.conf"

###################################################################################################
# Readiness polling budgets as (max attempts, interval seconds)
POLL_DOCKER_DAEMON = (15, 2)
POLL_CONTAINER_START = (30, 2)
POLL_DATABASE = (30, 5)
POLL_POSTGRES_NATIVE = (30, 2)
POLL_SOLR = (30, 5)
POLL_TOMCAT = (60, 5)
POLL_PM2 = (30, 5)
POLL_MARIADB = (30, 2)
POLL_APACHE = (30, 2)

# an HTTP readiness probe passes on any response below this status
HTTP_READY_STATUS_CEILING = 500

# number of log lines attached to readiness timeouts
DIAGNOSTIC_LOG_LINES = 50

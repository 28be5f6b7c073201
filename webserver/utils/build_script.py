"""Shell script used by the build pod to produce a web archive from source."""

import shlex
from string import Template
from typing import Optional

#: Mount point of the persistent volume shared with the application pods
WAR_MOUNT_PATH = "/mnt"

MAVEN_SETTINGS_PATH = "/tmp/.m2/settings.xml"

MAVEN_LOCAL_REPOSITORY = "/tmp/.m2/repo"

_BUILD_SCRIPT = Template(
    """webAppWarFileName=${war_file_name};
webAppSourceRepositoryURL=${source_url};
webAppSourceRepositoryRef=${ref};
webAppSourceRepositoryContextDir=${context_dir};

# Builds outside of the checkout so the build can run as any user
cd /tmp;

# Maven local repository for this build only
mkdir -p ${maven_repo};

# Create custom maven settings that change the location of the .m2 repo
echo '<settings xmlns="http://maven.apache.org/SETTINGS/1.0.0" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"' >> ${maven_settings}
echo 'xsi:schemaLocation="http://maven.apache.org/SETTINGS/1.0.0 https://maven.apache.org/xsd/settings-1.0.0.xsd">' >> ${maven_settings}
echo '<localRepository>${maven_repo}</localRepository>' >> ${maven_settings}
echo '</settings>' >> ${maven_settings}

if [ -z "$${webAppSourceRepositoryURL}" ]; then
  echo "Need an URL like https://github.com/jfclere/demo-webapp.git";
  exit 1;
fi

git clone "$${webAppSourceRepositoryURL}";
if [ $$? -ne 0 ]; then
  echo "Can't clone $${webAppSourceRepositoryURL}";
  exit 1;
fi

# Directory name is the last path segment of the URL without its extension
DIR=$$(echo $${webAppSourceRepositoryURL##*/});
DIR=$$(echo $${DIR%%.*});
cd "$${DIR}";

if [ -n "$${webAppSourceRepositoryRef}" ]; then
  git checkout "$${webAppSourceRepositoryRef}";
fi

if [ -n "$${webAppSourceRepositoryContextDir}" ]; then
  cd "$${webAppSourceRepositoryContextDir}";
fi

# Builds the webapp using the custom maven settings
mvn clean install -gs ${maven_settings};
if [ $$? -ne 0 ]; then
  echo "mvn install failed please check the pom.xml in $${webAppSourceRepositoryURL}";
  exit 1;
fi

cp target/*.war ${war_mount_path}/"$${webAppWarFileName}";
"""
)


def generate_build_script(
    war_file_name: str,
    source_url: str,
    ref: Optional[str] = None,
    context_dir: Optional[str] = None,
) -> str:
    """Return the script cloning `source_url` and building `war_file_name` with maven.

    The script exits with status 1 when the URL is empty, the clone fails or
    the maven build fails. Values are shell quoted, empty `ref` and
    `context_dir` are skipped.
    """
    return _BUILD_SCRIPT.substitute(
        war_file_name=shlex.quote(war_file_name),
        source_url=shlex.quote(source_url or ""),
        ref=shlex.quote(ref or ""),
        context_dir=shlex.quote(context_dir or ""),
        maven_repo=MAVEN_LOCAL_REPOSITORY,
        maven_settings=MAVEN_SETTINGS_PATH,
        war_mount_path=WAR_MOUNT_PATH,
    )

from setuptools import setup, find_namespace_packages

package_name = 'nubot_sim3d'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_namespace_packages(include=[package_name, package_name + '.*']),
    data_files=[
        ('share/ament_index/resource_index/packages',
            ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
    ],
    install_requires=['setuptools', 'numpy', 'scipy'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    maintainer='shluf',
    maintainer_email='luthfisalis09@gmail.com',
    description='Kontrol possession, stuck detection, shot & ball decay untuk robot rival di Gazebo (ROS2)',
    license='MIT',
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'rival = nubot_sim3d.rival_node:main',
        ],
    },
)

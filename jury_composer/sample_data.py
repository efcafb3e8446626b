"""
Example dataset used by ``python -m jury_composer --example`` and the tests.
"""

PROFESSORS_CSV = """ID,Title,Names,Science,University,Km,Count,Pre-last date,Last date
1,професор,Иван Петров,4.7,Софийски университет,0,5,2023-01-15,2023-06-20
2,доцент,Мария Георгиева,4.8,Пловдивски университет,120,3,2023-02-10,2023-05-15
3,професор,Петър Стоянов,4.6,Варненски свободен университет,350,7,2023-01-20,2023-07-10
4,доцент,Анна Димитрова,4.9,Технически университет София,5,2,2023-03-05,2023-08-12
5,професор,Георги Иванов,4.7,Университет за национално и световно стопанство,10,4,2023-02-28,2023-06-30
"""

PROCEDURES_CSV = """ID,Date,Procedure,M1,M2,M3,M4,M5,M6,M7
1,2023-06-20,доктор,1,2,3,4,5,null,null
2,2023-05-15,доцент,2,3,4,5,1,null,null
3,2023-07-10,професор,3,4,5,1,2,null,null
4,2023-08-12,ДН,4,5,1,2,3,null,null
5,2023-06-30,доктор,5,1,2,3,4,null,null
"""

HOME_UNIVERSITY = 'Софийски университет'
TARGET_DATE = '2023-09-15'
